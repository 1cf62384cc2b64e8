"""
Packet handler functions for the OpenTTD admin client.

Each handler is an async function that processes a specific packet type.
Handlers receive the client instance, the per-connection game state and the
packet payload, and are responsible for decoding the payload and updating
state or sending follow-up packets as needed.
"""

from .session import *
from .date import *
from .chat import *
from .rcon import *
from .unknown import *
