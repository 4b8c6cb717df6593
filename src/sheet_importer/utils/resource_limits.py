"""Scoped override of process resource limits for large workbook loads.

Loading a big workbook can exceed a soft address-space or CPU-time limit.
``lifted_resource_limits`` raises those soft limits to the hard limits for
the duration of a block and puts them back afterwards.

The CPU limit counts total seconds used by the process, so it is not reset
to its old value: that would signal SIGXCPU at once after a long load.
Instead the old soft limit is extended by the CPU time spent inside the
block, which leaves the process the same allowance it had on entry.
"""

import logging
import math
from contextlib import contextmanager
from typing import Dict, Generator, Tuple

try:
    import resource
except ImportError:  # Windows has no resource module
    resource = None


logger = logging.getLogger(__name__)

LIMIT_NAMES = ("RLIMIT_AS", "RLIMIT_CPU")


def _cpu_seconds() -> float:
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return usage.ru_utime + usage.ru_stime


def _restored_soft_limit(name: str, soft: int, hard: int, cpu_spent: float) -> int:
    if name != "RLIMIT_CPU" or soft == resource.RLIM_INFINITY:
        return soft

    extended = soft + math.ceil(cpu_spent)
    if hard != resource.RLIM_INFINITY:
        extended = min(extended, hard)
    return extended


@contextmanager
def lifted_resource_limits() -> Generator[Dict[str, Tuple[int, int]], None, None]:
    """Raise soft memory and CPU limits to their hard limits within the block.

    Yields:
        Mapping of limit name to the (soft, hard) pair in effect before lifting
    """
    previous: Dict[str, Tuple[int, int]] = {}

    if resource is None:
        logger.debug("Resource limits unsupported on this platform; nothing to lift")
        yield previous
        return

    for name in LIMIT_NAMES:
        limit = getattr(resource, name, None)
        if limit is None:
            continue

        soft, hard = resource.getrlimit(limit)
        if soft == hard:
            continue

        try:
            resource.setrlimit(limit, (hard, hard))
        except (ValueError, OSError) as e:
            logger.warning(f"Could not lift {name}: {e}")
            continue

        previous[name] = (soft, hard)
        logger.debug(f"Lifted {name} soft limit from {soft} to {hard}")

    cpu_before = _cpu_seconds()
    try:
        yield previous
    finally:
        cpu_spent = _cpu_seconds() - cpu_before
        for name, (soft, hard) in previous.items():
            restored = _restored_soft_limit(name, soft, hard, cpu_spent)
            try:
                resource.setrlimit(getattr(resource, name), (restored, hard))
            except (ValueError, OSError) as e:
                logger.warning(f"Could not restore {name}: {e}")
            else:
                logger.debug(f"Restored {name} soft limit to {restored}")
