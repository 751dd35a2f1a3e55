class YushanAdminError(Exception):
    """Base exception for all yushan_admin errors"""
    pass

class ConfigError(YushanAdminError):
    """Invalid or inconsistent global.json or table config"""
    pass

class ColumnConfigError(YushanAdminError):
    """
    Column descriptors that cannot be rendered safely:
    missing key/data_index, duplicate identities, etc
    """
    pass

class FilterConfigError(YushanAdminError):
    """Unknown filter type or duplicate filter key"""
    pass

class ExportError(YushanAdminError):
    """Unsupported export format or records that cannot be serialized"""
    pass

class PreferenceStoreError(YushanAdminError):
    """Preference store could not be read or written"""
    pass
