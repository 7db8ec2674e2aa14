"""
Plugin registry and lifecycle hook runner.

Plugins extend a capture at fixed points of the pipeline. Global plugins
are registered with PluginRegistry.use(); per-call plugins are passed in
the `plugins` option either as registered names, Plugin objects or
mappings that override the options of a registered plugin.
"""

import inspect
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .errors import HookFailure, InvalidPluginError
from ..utils.log import get_logger


class HookName(Enum):
    """Pipeline boundaries a plugin can hook into."""

    PRE_CLONE = "pre_clone"
    POST_CLONE = "post_clone"
    PRE_RENDER = "pre_render"
    POST_RENDER = "post_render"
    POST_EXPORT = "post_export"


HookHandler = Callable[[Any], Optional[Awaitable[None]]]


@dataclass
class Plugin:
    """
    A named set of hook handlers with its own options.
    
    Handlers receive the capture context and may be plain functions or
    coroutine functions.
    """

    name: str
    options: Dict[str, Any] = field(default_factory=dict)
    hooks: Dict[HookName, HookHandler] = field(default_factory=dict)

    def __post_init__(self):
        # Accept string hook keys such as "post_render"
        self.hooks = {HookName(key): handler for key, handler in self.hooks.items()}

    def handler(self, hook: HookName) -> Optional[HookHandler]:
        handler = self.hooks.get(hook)
        return handler if callable(handler) else None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Plugin":
        """
        Build a plugin from a mapping.
        
        Hook handlers may be given under a "hooks" mapping or as top-level
        keys named after the hook ("post_render": fn).
        
        Args:
            data: Mapping with at least a "name"
            
        Returns:
            Plugin instance
        """
        hooks = dict(data.get("hooks") or {})
        for hook in HookName:
            if hook.value in data:
                hooks[hook] = data[hook.value]
        return cls(
            name=data.get("name"),
            options=dict(data.get("options") or {}),
            hooks=hooks,
        )


PluginEntry = Union[str, Plugin, Mapping[str, Any]]


class PluginRegistry:
    """
    Registry of global plugins and runner for lifecycle hooks.
    """

    def __init__(self):
        self._plugins: Dict[str, Plugin] = {}
        self.logger = get_logger("plugins")

    def use(self, plugin: Union[Plugin, Mapping[str, Any]]) -> None:
        """
        Register a global plugin.
        
        Args:
            plugin: Plugin or mapping with a name
            
        Raises:
            InvalidPluginError: If the plugin has no name
        """
        if isinstance(plugin, Mapping):
            if not plugin.get("name"):
                raise InvalidPluginError("Plugin name is required")
            plugin = Plugin.from_mapping(plugin)
        if not isinstance(plugin, Plugin) or not plugin.name:
            raise InvalidPluginError("Plugin name is required")

        if plugin.name in self._plugins:
            self.logger.warning(f"Overwriting existing plugin '{plugin.name}'")
        self._plugins[plugin.name] = plugin

    def get(self, name: str) -> Optional[Plugin]:
        return self._plugins.get(name)

    def global_plugins(self) -> List[Plugin]:
        """Get all registered plugins in registration order."""
        return list(self._plugins.values())

    def clear(self) -> None:
        """Remove every registered plugin."""
        self._plugins.clear()

    def normalize(self, entries: Iterable[PluginEntry], debug: bool = False) -> List[Plugin]:
        """
        Turn a list of plugin entries into Plugin objects.
        
        Names resolve against the registry. A Plugin or mapping whose name
        is registered keeps the registered hooks and gets the registered
        options overridden field by field.
        
        Args:
            entries: Names, Plugin objects or mappings
            debug: Log skipped entries
            
        Returns:
            Normalized plugin list, in entry order
        """
        normalized: List[Plugin] = []
        for entry in entries or []:
            if isinstance(entry, str):
                registered = self._plugins.get(entry)
                if registered:
                    normalized.append(registered)
                elif debug:
                    self.logger.warning(f"Unknown plugin name: {entry}")
                continue

            if isinstance(entry, Mapping) and entry.get("name"):
                entry = Plugin.from_mapping(entry)

            if isinstance(entry, Plugin) and entry.name:
                base = self._plugins.get(entry.name)
                if base:
                    normalized.append(
                        replace(base, options={**base.options, **entry.options})
                    )
                else:
                    normalized.append(entry)
            elif debug:
                self.logger.warning(f"Invalid plugin configuration skipped: {entry!r}")
        return normalized

    def effective_plugins(
        self,
        entries: Iterable[PluginEntry],
        ignore_globals: bool = False,
        debug: bool = False
    ) -> List[Plugin]:
        """
        Combine global and per-call plugins.
        
        Globals come first in registration order. A local plugin sharing a
        global's name takes that global's place; other locals follow in
        list order.
        
        Args:
            entries: Per-call plugin entries
            ignore_globals: Leave out plugins not named in entries
            debug: Log skipped entries
            
        Returns:
            Ordered plugin list
        """
        local = self.normalize(entries, debug)
        if ignore_globals:
            return local

        effective = self.global_plugins()
        positions = {plugin.name: index for index, plugin in enumerate(effective)}
        for plugin in local:
            if plugin.name in positions:
                effective[positions[plugin.name]] = plugin
            else:
                positions[plugin.name] = len(effective)
                effective.append(plugin)
        return effective

    async def run_hook(self, hook: HookName, context) -> None:
        """
        Run one hook on every applicable plugin, one at a time.
        
        Handlers run in plugin order and each is awaited before the next
        starts, so later plugins observe earlier plugins' changes to the
        context.
        
        Args:
            hook: Hook to run
            context: CaptureContext shared by all handlers
            
        Raises:
            HookFailure: If a handler raises
        """
        options = context.options
        context.plugins = self.effective_plugins(
            options.plugins, options.ignore_global_plugins, options.debug
        )
        for plugin in context.plugins:
            handler = plugin.handler(hook)
            if handler is None:
                continue
            try:
                result = handler(context)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                raise HookFailure(plugin.name, hook.value, e) from e


# Process-wide registry used by the public API unless one is passed in
default_registry = PluginRegistry()
