from market.realtime.authenticator import ConnectionAuthenticator, ConnectionIdentity
from market.realtime.channel import Channel, WebSocketChannel
from market.realtime.gateway import MessageGateway
from market.realtime.registry import ChannelRegistry
from market.realtime.store import ConversationStore

__all__ = [
    "Channel",
    "ChannelRegistry",
    "ConnectionAuthenticator",
    "ConnectionIdentity",
    "ConversationStore",
    "MessageGateway",
    "WebSocketChannel",
]
