from .actor import ActorHandle, ActorState, current_actor, spawn
from .component import Component, ConnectedComponent, connected_attrs
from .connected import ConnectedCoordinator, get_registry, install, send_component
from .coordinator import ComponentInstance, Coordinator, current_coordinator
from .element import Element, LiveComponent, RemoveBinding, h, live_component
from .exceptions import (
    CallbackContractError,
    ConnectedComponentError,
    DuplicateComponentError,
    HookError,
    LinkedActorError,
    NotInstalledError,
)
from .hooks import HookChain, HookResult, HookStage
from .identity import ComponentDescriptor, IdentityToken, parse_token
from .pubsub import PubSub
from .registry import CorrelationRegistry
from .results import CallbackResult, Reply, noreply, ok
from .settings import CoordinatorSettings, load_settings
from .socket import Socket

__all__ = [
    'ActorHandle',
    'ActorState',
    'current_actor',
    'spawn',
    'Component',
    'ConnectedComponent',
    'connected_attrs',
    'ConnectedCoordinator',
    'get_registry',
    'install',
    'send_component',
    'ComponentInstance',
    'Coordinator',
    'current_coordinator',
    'Element',
    'LiveComponent',
    'RemoveBinding',
    'h',
    'live_component',
    'CallbackContractError',
    'ConnectedComponentError',
    'DuplicateComponentError',
    'HookError',
    'LinkedActorError',
    'NotInstalledError',
    'HookChain',
    'HookResult',
    'HookStage',
    'ComponentDescriptor',
    'IdentityToken',
    'parse_token',
    'PubSub',
    'CorrelationRegistry',
    'CallbackResult',
    'Reply',
    'noreply',
    'ok',
    'CoordinatorSettings',
    'load_settings',
    'Socket',
]
