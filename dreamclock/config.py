from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


ENV_PREFIX = "DREAMCLOCK_"


@dataclass(frozen=True)
class Settings:
    package_domain: str = "com.dreamclock"
    package_name: str = "persistent"
    service_name: str = "Alarms"
    channel_id: str = "alarm_service_channel"
    channel_name: str = "Dream Clock Background Service"
    channel_description: str = "Keeps Dream Clock alarms active in background"
    notification_id: int = 1001
    announcement_title: str = "Dream Clock"
    announcement_text: str = "Alarms are active in background"
    exemption_request_code: int = 1001
    backoff_initial_s: float = 5.0
    backoff_max_s: float = 300.0
    backoff_max_attempts: int = 6
    tick_interval_s: float = 30.0

    @property
    def java_package(self) -> str:
        return f"{self.package_domain}.{self.package_name}"

    @property
    def service_class(self) -> str:
        # p4a names generated service classes Service<Name>.
        return f"{self.java_package}.Service{self.service_name}"


def _env(env: Mapping[str, str], key: str, default: str) -> str:
    return (env.get(ENV_PREFIX + key, "") or "").strip() or default


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    try:
        return int(_env(env, key, str(default)))
    except ValueError:
        return default


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    try:
        value = float(_env(env, key, str(default)))
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    d = Settings()
    return Settings(
        package_domain=_env(env, "PACKAGE_DOMAIN", d.package_domain),
        package_name=_env(env, "PACKAGE_NAME", d.package_name),
        service_name=_env(env, "SERVICE_NAME", d.service_name),
        channel_id=_env(env, "CHANNEL_ID", d.channel_id),
        channel_name=_env(env, "CHANNEL_NAME", d.channel_name),
        channel_description=_env(env, "CHANNEL_DESCRIPTION", d.channel_description),
        notification_id=_env_int(env, "NOTIFICATION_ID", d.notification_id),
        announcement_title=_env(env, "ANNOUNCEMENT_TITLE", d.announcement_title),
        announcement_text=_env(env, "ANNOUNCEMENT_TEXT", d.announcement_text),
        exemption_request_code=_env_int(env, "EXEMPTION_REQUEST_CODE", d.exemption_request_code),
        backoff_initial_s=_env_float(env, "BACKOFF_INITIAL_S", d.backoff_initial_s),
        backoff_max_s=_env_float(env, "BACKOFF_MAX_S", d.backoff_max_s),
        backoff_max_attempts=max(0, _env_int(env, "BACKOFF_MAX_ATTEMPTS", d.backoff_max_attempts)),
        tick_interval_s=_env_float(env, "TICK_INTERVAL_S", d.tick_interval_s),
    )
