"""
Hooks package
Maps record-store module names to their hook modules

Usage:
    from hooks import run_hook
    data = run_hook("articles", "after_create", data)
"""

import logging

from . import article_hooks

logger = logging.getLogger("main")

HOOKS = {
    "articles": article_hooks,
}

HOOK_NAMES = (
    "before_create",
    "after_create",
    "before_update",
    "after_update",
    "before_delete",
    "after_delete",
)


def run_hook(module_name, hook_name, *args, **kwargs):
    """Run a registered hook; unregistered modules or hooks hand back the first argument"""
    module = HOOKS.get(module_name)
    hook = getattr(module, hook_name, None) if module and hook_name in HOOK_NAMES else None
    if hook is None:
        logger.debug(f"No {hook_name} hook registered for {module_name}")
        return args[0] if args else None
    return hook(*args, **kwargs)
