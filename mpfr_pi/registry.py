"""Named strategies selectable from the command line."""

from __future__ import annotations

from typing import Dict, List, Type

from .config import UnknownAlgorithmError
from .ramanujan_1910 import Ramanujan1910
from .ramanujan_1910_opt import Ramanujan1910Opt
from .strategy import SeriesStrategy


ALGORITHMS: Dict[str, Type[SeriesStrategy]] = {
    cls.key: cls for cls in (Ramanujan1910, Ramanujan1910Opt)
}

DEFAULT_ALGORITHM = Ramanujan1910Opt.key


def algorithm_names() -> List[str]:
    return list(ALGORITHMS)


def get_algorithm(name: str) -> Type[SeriesStrategy]:
    """Look up a strategy class by name; unknown names are never guessed."""
    try:
        return ALGORITHMS[name]
    except KeyError:
        raise UnknownAlgorithmError(name, algorithm_names()) from None
