"""
Carrier directory.
Maps carrier names and common aliases to provider carrier codes.
"""

from typing import Optional


# code -> (display name, aliases)
CARRIERS: dict[str, tuple[str, tuple[str, ...]]] = {
    "shunfeng": ("顺丰速运", ("顺丰", "sf", "sf express")),
    "jd": ("京东物流", ("京东", "jd logistics")),
    "debangkuaidi": ("德邦快递", ("德邦", "deppon")),
    "yuantong": ("圆通速递", ("圆通", "yto")),
    "zhongtong": ("中通快递", ("中通", "zto")),
    "yunda": ("韵达快递", ("韵达",)),
    "shentong": ("申通快递", ("申通", "sto")),
    "ems": ("EMS", ("中国邮政ems", "邮政ems")),
    "youzhengguonei": ("邮政快递包裹", ("邮政", "中国邮政", "china post")),
    "jtexpress": ("极兔速递", ("极兔", "j&t", "j&t express")),
    "zhaijisong": ("宅急送", ()),
}


def _build_alias_index() -> dict[str, str]:
    index: dict[str, str] = {}
    for code, (name, aliases) in CARRIERS.items():
        index[code] = code
        index[name.lower()] = code
        for alias in aliases:
            index[alias.lower()] = code
    return index


_ALIAS_INDEX = _build_alias_index()


def resolve_carrier_code(carrier: str) -> str:
    """
    Resolve a carrier name or code to the provider code.

    Unknown values are passed through unchanged so the provider
    can accept codes this directory does not list.
    """
    key = carrier.strip()
    return _ALIAS_INDEX.get(key.lower(), key)


def carrier_name(code: str) -> Optional[str]:
    """Display name for a carrier code, if known."""
    entry = CARRIERS.get(code)
    return entry[0] if entry else None
