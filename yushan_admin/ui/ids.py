from __future__ import annotations

__all__ = [
    "IDs",
    "bulk_action_id",
    "quick_action_id",
    "export_item_id",
    "export_single_id",
    "filter_value_id",
    "filter_date_id",
    "filter_daterange_id",
    "filter_num_min_id",
    "filter_num_max_id",
    "filter_tag_id",
]


class IDs:
    class Store:
        SELECTION = "selection-state"
        FILTER_VALUES = "filter-values"
        FILTER_PANEL_VERSION = "filter-panel-version"
        COLUMN_PREFS = "column-prefs"
        PENDING_ACTION = "pending-bulk-action"
        DATA_VERSION = "data-version"

    class Control:
        TABLE_SELECT = "table-select"
        TABLE_TITLE = "table-title"
        TABLE_HEADER = "table-header"
        GRID = "data-grid"
        FOOTER = "table-footer"
        PAGE_SUMMARY = "table-page-summary"

        # Bulk actions
        BULK_BAR = "bulk-bar"
        BULK_COUNT = "bulk-count"
        BULK_MENU_CONTAINER = "bulk-menu-container"
        BULK_TOASTS = "bulk-toasts"
        CONFIRM_MODAL = "confirm-modal"
        CONFIRM_TITLE = "confirm-title"
        CONFIRM_BODY = "confirm-body"
        CONFIRM_OK = "confirm-ok"
        CONFIRM_CANCEL = "confirm-cancel"

        # Column selector
        COLUMN_MENU = "column-menu"
        COLUMN_SEARCH = "column-search"
        COLUMN_MASTER = "column-master"
        COLUMN_CHECKLIST = "column-checklist"
        COLUMN_RESET = "column-reset"
        COLUMN_SUMMARY = "column-summary"

        # Export
        EXPORT_CONTAINER = "export-container"
        EXPORT_DOWNLOAD = "export-download"
        EXPORT_TOASTS = "export-toasts"

        # Filters
        FILTER_PANEL = "filter-panel"
        FILTER_QUICK = "filter-quick"
        FILTER_ADVANCED = "filter-advanced"
        FILTER_ADVANCED_COLLAPSE = "filter-advanced-collapse"
        FILTER_ADVANCED_TOGGLE = "filter-advanced-toggle"
        FILTER_RESET = "filter-reset"
        FILTER_TAGS = "filter-tags"
        FILTER_COUNT = "filter-count"

    class Pattern:
        # pattern-matching "type" strings
        BULK_ACTION = "bulk-action"
        QUICK_ACTION = "bulk-quick"
        EXPORT_ITEM = "export-item"
        EXPORT_SINGLE = "export-single"
        FILTER_VALUE = "filter-value"
        FILTER_DATE = "filter-date"
        FILTER_DATERANGE = "filter-daterange"
        FILTER_NUM_MIN = "filter-num-min"
        FILTER_NUM_MAX = "filter-num-max"
        FILTER_TAG = "filter-tag"


def bulk_action_id(key: str) -> dict:
    return {"type": IDs.Pattern.BULK_ACTION, "key": key}


def quick_action_id(key: str) -> dict:
    return {"type": IDs.Pattern.QUICK_ACTION, "key": key}


def export_item_id(key: str) -> dict:
    return {"type": IDs.Pattern.EXPORT_ITEM, "key": key}


def export_single_id(key: str) -> dict:
    return {"type": IDs.Pattern.EXPORT_SINGLE, "key": key}


def filter_value_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_VALUE, "key": key}


def filter_date_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_DATE, "key": key}


def filter_daterange_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_DATERANGE, "key": key}


def filter_num_min_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_NUM_MIN, "key": key}


def filter_num_max_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_NUM_MAX, "key": key}


def filter_tag_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_TAG, "key": key}
