#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import copy
from numbers import Number
from typing import Any, Mapping, Optional


def _same_scalar(value: Any, default: Any) -> bool:
    if isinstance(value, bool) or isinstance(default, bool):
        return isinstance(value, bool) and isinstance(default, bool) and value == default
    if isinstance(value, Number) and isinstance(default, Number):
        return value == default
    return type(value) is type(default) and value == default


def minimize(value: Any, defaults: Any = None) -> Any:
    """Drop everything `restore` can put back from `defaults`.

    Returns None when the whole value can be omitted.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = [m for m in (minimize(v) for v in value) if m is not None]
        return items or None
    if isinstance(value, Mapping):
        base = defaults if isinstance(defaults, Mapping) else {}
        out = {}
        for key, v in value.items():
            m = minimize(v, base.get(key))
            if m is None:
                continue
            if not isinstance(m, (dict, list)) and key in base and _same_scalar(m, base[key]):
                continue
            out[key] = m
        return out or None
    return value


def restore(value: Any, defaults: Optional[Mapping[str, Any]]) -> Any:
    if value is None:
        return copy.deepcopy(defaults)
    if isinstance(value, Mapping) and isinstance(defaults, Mapping):
        restored = copy.deepcopy(dict(defaults))
        for key, v in value.items():
            nested = defaults.get(key)
            if isinstance(v, Mapping) and isinstance(nested, Mapping) and nested:
                restored[key] = restore(v, nested)
            else:
                restored[key] = v
        return restored
    return value
