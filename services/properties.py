import logging
from pathlib import Path
from typing import Dict, List, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def parse_properties(text: str) -> Dict[str, str]:
    props: Dict[str, str] = {}
    for raw in str(text or "").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        props[key.strip()] = value.strip()
    return props


def load_properties(path: PathLike) -> Dict[str, str]:
    """Read a server.properties file; a missing file yields no properties."""
    p = Path(path)
    if not p.exists():
        logger.warning("Server properties not found at %s", p)
        return {}
    return parse_properties(p.read_text(encoding="utf-8"))


def load_ops(path: PathLike) -> List[str]:
    """Operator names, one per line, lowercased."""
    p = Path(path)
    if not p.exists():
        return []
    names = []
    for raw in p.read_text(encoding="utf-8").splitlines():
        name = raw.strip().lower()
        if name and not name.startswith("#"):
            names.append(name)
    return names
