"""Site branding settings (logo, title, description)"""

from flask import current_app

from app.errors import ValidationError

DEFAULT_SETTING_KEYS = {
    "siteLogo": "SITE_LOGO",
    "siteTitle": "SITE_TITLE",
    "siteDescription": "SITE_DESCRIPTION",
}


class SettingsService:
    def __init__(self, store):
        self.store = store

    def get_setting(self, key):
        """Stored value, else the configured default, else None"""
        value = self.store.get_setting(key)
        if value is None and key in DEFAULT_SETTING_KEYS:
            value = current_app.config.get(DEFAULT_SETTING_KEYS[key])
        return value

    def update_setting(self, key, value):
        if not key or not key.strip():
            raise ValidationError("Setting key is required")
        if value is None or not str(value).strip():
            raise ValidationError("Value is required")
        return self.store.update_setting(key.strip(), str(value))

    def seed_defaults(self):
        """Store configured defaults for settings that are not set yet"""
        created = []
        for key, config_key in DEFAULT_SETTING_KEYS.items():
            if self.store.get_setting(key) is None:
                self.store.update_setting(key, current_app.config[config_key])
                created.append(key)
        return created
