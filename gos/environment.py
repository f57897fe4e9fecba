from typing import Any, Dict, Optional

from .errors import UndefinedError
from .values import FunctionVal


class Environment:
    """A lexical scope holding variables and functions in separate namespaces.

    Lookups fall back to the parent scope on a miss. A scope is created for
    every function call and for the root of every run; blocks and loop
    bodies share the scope they appear in.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.variables: Dict[str, Any] = {}
        self.functions: Dict[str, FunctionVal] = {}

    def resolve_variable(self, name: str) -> Optional['Environment']:
        """Return the nearest scope that binds `name` as a variable."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.variables:
                return env
            env = env.parent
        return None

    def resolve_function(self, name: str) -> Optional['Environment']:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.functions:
                return env
            env = env.parent
        return None

    def get_variable(self, name: str) -> Any:
        env = self.resolve_variable(name)
        if env is None:
            raise UndefinedError(f'undefined identifier {name}')
        return env.variables[name]

    def get_function(self, name: str) -> FunctionVal:
        env = self.resolve_function(name)
        if env is None:
            raise UndefinedError(f'undefined function {name}')
        return env.functions[name]

    def declare(self, name: str, value: Any):
        """Bind `name` in this scope, shadowing any outer binding."""
        self.variables[name] = value

    def assign(self, name: str, value: Any):
        # Rebind where the name is visible, otherwise declare it here
        env = self.resolve_variable(name) or self
        env.variables[name] = value

    def define_function(self, name: str, func: FunctionVal):
        self.functions[name] = func
