# backend/notion_charts/notion/properties.py

"""
Notion ページのプロパティ値を正規化されたスカラー値に変換するモジュール。

Notion のページ構造を直接見るのはこのモジュールだけにする。
下流のチャート変換はここで得た str / 数値 / bool / None だけを扱う。
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

ScalarValue = Union[str, int, float, bool]


class PropertyType(str, Enum):
    """変換対象としてサポートするプロパティ型。"""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    CHECKBOX = "checkbox"
    STATUS = "status"
    FORMULA = "formula"
    ROLLUP = "rollup"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first_plain_text(runs: Any) -> str:
    """
    rich text の配列から先頭要素の plain_text を返す。空なら空文字列。
    """
    if isinstance(runs, list) and runs:
        first = runs[0]
        if isinstance(first, dict):
            text = first.get("plain_text")
            if isinstance(text, str):
                return text
    return ""


def _option_name(option: Any) -> Optional[str]:
    if isinstance(option, dict):
        name = option.get("name")
        if isinstance(name, str):
            return name
    return None


def _extract_title(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    return _first_plain_text(prop.get("title"))


def _extract_rich_text(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    return _first_plain_text(prop.get("rich_text"))


def _extract_number(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    value = prop.get("number")
    return value if _is_number(value) else None


def _extract_select(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    return _option_name(prop.get("select"))


def _extract_status(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    return _option_name(prop.get("status"))


def _extract_multi_select(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    options = prop.get("multi_select")
    if not isinstance(options, list):
        return None
    names = [name for name in (_option_name(o) for o in options) if name is not None]
    return ", ".join(names)


def _extract_date(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    date = prop.get("date")
    if not isinstance(date, dict):
        return None
    start = date.get("start")
    return start if isinstance(start, str) else None


def _extract_checkbox(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    value = prop.get("checkbox")
    return value if isinstance(value, bool) else None


def _extract_formula(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    formula = prop.get("formula")
    if not isinstance(formula, dict):
        return None

    kind = formula.get("type")
    value = formula.get(kind) if isinstance(kind, str) else None
    if kind == "number" and _is_number(value):
        return value
    if kind == "string" and isinstance(value, str):
        return value
    if kind == "boolean" and isinstance(value, bool):
        return value
    return None


def _extract_rollup(prop: Dict[str, Any]) -> Optional[ScalarValue]:
    rollup = prop.get("rollup")
    if not isinstance(rollup, dict) or rollup.get("type") != "number":
        return None
    value = rollup.get("number")
    return value if _is_number(value) else None


_EXTRACTORS: Dict[PropertyType, Callable[[Dict[str, Any]], Optional[ScalarValue]]] = {
    PropertyType.TITLE: _extract_title,
    PropertyType.RICH_TEXT: _extract_rich_text,
    PropertyType.NUMBER: _extract_number,
    PropertyType.SELECT: _extract_select,
    PropertyType.MULTI_SELECT: _extract_multi_select,
    PropertyType.DATE: _extract_date,
    PropertyType.CHECKBOX: _extract_checkbox,
    PropertyType.STATUS: _extract_status,
    PropertyType.FORMULA: _extract_formula,
    PropertyType.ROLLUP: _extract_rollup,
}


def get_property_value(
    record: Mapping[str, Any],
    property_name: str,
) -> Optional[ScalarValue]:
    """
    1 レコードから指定プロパティの値を取り出し、スカラー値に正規化する。

    - プロパティが存在しない場合は None
    - サポート外の型や想定外の形は None
    - 例外は投げない
    """
    properties = record.get("properties") if isinstance(record, Mapping) else None
    if not isinstance(properties, Mapping):
        return None

    prop = properties.get(property_name)
    if not isinstance(prop, dict):
        return None

    try:
        prop_type = PropertyType(prop.get("type"))
    except ValueError:
        return None

    return _EXTRACTORS[prop_type](prop)
