"""Process identity metadata attached to every health report."""

import importlib.metadata
import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple


logger = logging.getLogger(__name__)

UNAVAILABLE = "NA"


@dataclass(frozen=True)
class ProcessIdentity:
    """Identity of the running program and of every component it has loaded."""
    assembly: str
    assemblies: Tuple[str, ...]


def _format_identity(name: str, version: Optional[str]) -> str:
    return f"{name}, Version={version}" if version else name


def _distribution_version(top_level: str, distributions: Dict[str, List[str]]) -> Optional[str]:
    """Resolve the installed version providing a top-level module, if any."""
    candidates = distributions.get(top_level) or [top_level]
    for dist_name in candidates:
        try:
            return importlib.metadata.version(dist_name)
        except importlib.metadata.PackageNotFoundError:
            continue
    return None


def resolve_entry_identity() -> str:
    """
    Identify the program that started this process.

    Uses the top-level name of the ``__main__`` module (from its module spec
    when run with ``-m``, otherwise the script file name) and appends the
    installed version when one can be found.

    Returns:
        Identity string, or "NA" when the entry program cannot be determined
    """
    main_module = sys.modules.get('__main__')
    if main_module is None:
        return UNAVAILABLE

    spec = getattr(main_module, '__spec__', None)
    if spec is not None and spec.name:
        name = spec.name.split('.')[0]
    else:
        main_file = getattr(main_module, '__file__', None)
        if not main_file:
            return UNAVAILABLE
        name = Path(main_file).stem

    if not name:
        return UNAVAILABLE

    distributions = importlib.metadata.packages_distributions()
    return _format_identity(name, _distribution_version(name, distributions))


def list_loaded_components() -> List[str]:
    """
    List every top-level module loaded in this process, in load order.

    Returns:
        Component identity strings
    """
    distributions = importlib.metadata.packages_distributions()
    components = []
    seen = set()
    for module_name in list(sys.modules):
        top_level = module_name.split('.')[0]
        if not top_level or top_level.startswith('_') or top_level in seen:
            continue
        seen.add(top_level)
        components.append(_format_identity(top_level, _distribution_version(top_level, distributions)))
    return components


class ProcessIdentityCache:
    """
    Lazily computed, process-lifetime ProcessIdentity.

    The snapshot is taken on the first ``get()`` and never refreshed, even if
    more components are loaded afterwards. Concurrent first calls compute it
    exactly once.
    """

    def __init__(self,
                 entry_resolver: Callable[[], str] = resolve_entry_identity,
                 component_lister: Callable[[], Sequence[str]] = list_loaded_components):
        """
        Initialize identity cache.

        Args:
            entry_resolver: Returns the entry program identity
            component_lister: Returns the loaded component identities
        """
        self._entry_resolver = entry_resolver
        self._component_lister = component_lister
        self._lock = threading.Lock()
        self._identity: Optional[ProcessIdentity] = None

    @property
    def is_initialized(self) -> bool:
        return self._identity is not None

    def get(self) -> ProcessIdentity:
        """Return the identity snapshot, computing it on first use."""
        identity = self._identity
        if identity is not None:
            return identity

        with self._lock:
            if self._identity is None:
                self._identity = ProcessIdentity(
                    assembly=self._entry_resolver() or UNAVAILABLE,
                    assemblies=tuple(self._component_lister()),
                )
                logger.debug(
                    f"Process identity captured: {self._identity.assembly} "
                    f"({len(self._identity.assemblies)} components)"
                )
            return self._identity

    def reset(self) -> None:
        """Drop the snapshot so the next get() recomputes it."""
        with self._lock:
            self._identity = None


process_identity = ProcessIdentityCache()


def get_process_identity() -> ProcessIdentity:
    """Return the process-wide identity snapshot."""
    return process_identity.get()
