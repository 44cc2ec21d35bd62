"""
ceac-filler Package
Main package initialization
"""
from .config import ConfigurationManager, ConfigurationError, FieldLocator, FillConfig, SecurityConfig
from .utils import substitute_env_vars
from .browser import BrowserWindow, WindowHost
from .coordinator import Coordinator
from .jsonrpc_handler import JSONRPCHandler

__all__ = [
    'ConfigurationManager',
    'ConfigurationError',
    'FieldLocator',
    'FillConfig',
    'SecurityConfig',
    'substitute_env_vars',
    'BrowserWindow',
    'WindowHost',
    'Coordinator',
    'JSONRPCHandler'
]
