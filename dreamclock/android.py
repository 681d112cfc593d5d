from __future__ import annotations

from typing import Any, Callable, Optional

from kivy.logger import Logger
from kivy.utils import platform as _kivy_platform

from .commands import Command
from .config import Settings
from .errors import DownstreamLaunchFailed, EnvironmentUnsupported, PolicyDenied
from .platform import API_M, API_O, AnnouncementChannel, LivenessAnnouncement

try:
    from jnius import autoclass, cast  # type: ignore
except Exception:  # pragma: no cover
    autoclass = None
    cast = None


ACTIVITY_CLASS = "org.kivy.android.PythonActivity"
SERVICE_CLASS = "org.kivy.android.PythonService"
AUTO_START_EXTRA = "auto_start"


def android_ready() -> bool:
    return _kivy_platform == "android" and autoclass is not None


def _require_android() -> None:
    if not android_ready():
        raise EnvironmentUnsupported("Android runtime not available")


def android_sdk_int() -> int:
    if not android_ready():
        return 0
    try:
        BuildVERSION = autoclass("android.os.Build$VERSION")
        return int(BuildVERSION.SDK_INT)
    except Exception:
        return 0


def current_activity():
    _require_android()
    return autoclass(ACTIVITY_CLASS).mActivity


def current_service():
    _require_android()
    return autoclass(SERVICE_CLASS).mService


def _char_sequence(text: str):
    String = autoclass("java.lang.String")
    return cast("java.lang.CharSequence", String(text))


class AndroidForeground:
    """Notification channel and foreground elevation for the p4a service."""

    def __init__(self, service: Any = None) -> None:
        self.service = service if service is not None else current_service()

    def create_channel(self, channel: AnnouncementChannel) -> None:
        if android_sdk_int() < API_O:
            return
        NotificationChannel = autoclass("android.app.NotificationChannel")
        Context = autoclass("android.content.Context")
        NotificationManager = autoclass("android.app.NotificationManager")

        ch = NotificationChannel(channel.id, _char_sequence(channel.name), channel.importance)
        ch.setDescription(channel.description)
        ch.setShowBadge(channel.show_badge)
        if channel.silent:
            ch.setSound(None, None)
        manager = cast(NotificationManager, self.service.getSystemService(Context.NOTIFICATION_SERVICE))
        if manager is not None:
            manager.createNotificationChannel(ch)

    def _build_notification(self, announcement: LivenessAnnouncement):
        Intent = autoclass("android.content.Intent")
        PendingIntent = autoclass("android.app.PendingIntent")
        Notification = autoclass("android.app.Notification")
        Builder = autoclass("android.app.Notification$Builder")

        sdk = android_sdk_int()
        ctx = self.service
        intent = Intent()
        intent.setClassName(ctx, ACTIVITY_CLASS)
        flags = PendingIntent.FLAG_UPDATE_CURRENT
        if sdk >= API_M:
            flags |= PendingIntent.FLAG_IMMUTABLE
        pending = PendingIntent.getActivity(ctx, 0, intent, int(flags))

        builder = Builder(ctx, announcement.channel_id) if sdk >= API_O else Builder(ctx)
        builder.setContentTitle(_char_sequence(announcement.title))
        builder.setContentText(_char_sequence(announcement.text))
        builder.setSmallIcon(ctx.getApplicationInfo().icon)
        builder.setContentIntent(pending)
        builder.setOngoing(announcement.ongoing)
        builder.setCategory(Notification.CATEGORY_SERVICE)
        builder.setVisibility(Notification.VISIBILITY_PUBLIC)
        if sdk < API_O:
            builder.setPriority(Notification.PRIORITY_LOW)
        return builder.build()

    def start_foreground(self, notification_id: int, announcement: LivenessAnnouncement) -> None:
        try:
            notification = self._build_notification(announcement)
            self.service.startForeground(int(notification_id), notification)
        except Exception as exc:
            raise PolicyDenied(f"startForeground refused: {exc}") from exc

    def stop_foreground(self) -> None:
        self.service.stopForeground(True)


class AndroidPower:
    def __init__(self, activity: Any = None) -> None:
        self.activity = activity if activity is not None else current_activity()

    def sdk_int(self) -> int:
        return android_sdk_int()

    def package_name(self) -> str:
        return str(self.activity.getPackageName())

    def is_exempt(self, package: str) -> bool:
        Context = autoclass("android.content.Context")
        PowerManager = autoclass("android.os.PowerManager")
        pm = cast(PowerManager, self.activity.getSystemService(Context.POWER_SERVICE))
        return bool(pm.isIgnoringBatteryOptimizations(package))

    def request_exemption(self, package: str, request_code: int) -> None:
        Intent = autoclass("android.content.Intent")
        Uri = autoclass("android.net.Uri")
        AndroidSettings = autoclass("android.provider.Settings")
        try:
            intent = Intent(AndroidSettings.ACTION_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS)
            intent.setData(Uri.parse(f"package:{package}"))
            self.activity.startActivityForResult(intent, int(request_code))
        except Exception as exc:
            raise DownstreamLaunchFailed(f"exemption prompt failed: {exc}") from exc


class AndroidLauncher:
    """Start requests for the Alarms service and the host activity."""

    def __init__(self, context: Any, settings: Optional[Settings] = None) -> None:
        self.context = context
        self.settings = settings or Settings()

    def start_service(self, command: Command) -> None:
        try:
            service = autoclass(self.settings.service_class)
            service.start(self.context, command.value)
        except Exception as exc:
            raise DownstreamLaunchFailed(f"service start {command.value} failed: {exc}") from exc
        Logger.debug(f"DreamClock: requested service start {command.value}")

    def launch_ui(self, suppressed: bool) -> None:
        try:
            Intent = autoclass("android.content.Intent")
            intent = Intent()
            intent.setClassName(self.context, ACTIVITY_CLASS)
            intent.addFlags(Intent.FLAG_ACTIVITY_NEW_TASK)
            intent.putExtra(AUTO_START_EXTRA, bool(suppressed))
            self.context.startActivity(intent)
        except Exception as exc:
            raise DownstreamLaunchFailed(f"activity launch failed: {exc}") from exc


def launched_suppressed(activity: Any = None) -> bool:
    if not android_ready():
        return False
    try:
        activity = activity if activity is not None else current_activity()
        intent = activity.getIntent()
        return bool(intent is not None and intent.getBooleanExtra(AUTO_START_EXTRA, False))
    except Exception:
        return False


def move_task_to_back(activity: Any = None) -> None:
    activity = activity if activity is not None else current_activity()
    activity.moveTaskToBack(True)


def bind_activity_result(callback: Callable[[int, int], object]) -> None:
    """Routes onActivityResult(requestCode, resultCode, data) to `callback`."""
    _require_android()
    from android import activity as android_activity  # type: ignore

    android_activity.bind(on_activity_result=lambda request_code, result_code, _data: callback(request_code, result_code))


def set_auto_restart(service: Any = None) -> None:
    """Ask p4a to restart the service process after the OS kills it."""
    service = service if service is not None else current_service()
    service.setAutoRestartService(True)
