# pylint: disable=missing-module-docstring,missing-function-docstring

from dreamclock.android_src import render_boot_receiver, render_manifest, write_android_sources
from dreamclock.config import Settings
from dreamclock.recovery import RECOVERY_ACTIONS


def test_manifest_lists_every_recovery_action():
    xml = render_manifest(Settings())
    for action in RECOVERY_ACTIONS:
        assert f'<action android:name="{action}"/>' in xml
    assert 'android:name="com.dreamclock.persistent.BootReceiver"' in xml
    assert "RECEIVE_BOOT_COMPLETED" in xml


def test_extra_actions_are_additive():
    xml = render_manifest(Settings(), list(RECOVERY_ACTIONS) + ["com.vendor.QUICKBOOT"])
    assert xml.count("<action ") == len(RECOVERY_ACTIONS) + 1


def test_receiver_forwards_to_service():
    java = render_boot_receiver(Settings(package_domain="org.example", package_name="clock"))
    assert "package org.example.clock;" in java
    assert 'org.example.clock.ServiceAlarms.start(context, "RECOVERY:" + action);' in java


def test_write_android_sources(tmp_path):
    root = write_android_sources(tmp_path)

    assert (root / "extra_manifest.xml").is_file()
    java = root / "com" / "dreamclock" / "persistent" / "BootReceiver.java"
    assert java.is_file()
    assert "class BootReceiver" in java.read_text(encoding="utf-8")


def _filters(xml):
    return xml.split("<intent-filter>")[1:]


def test_package_scheme_only_on_package_replaced_filter():
    filters = _filters(render_manifest(Settings()))

    assert len(filters) == 2
    plain, with_package = filters
    assert 'android:scheme="package"' not in plain
    assert "android.intent.action.BOOT_COMPLETED" in plain
    assert "android.intent.action.MY_PACKAGE_REPLACED" in plain
    assert 'android:scheme="package"' in with_package
    assert '<action android:name="android.intent.action.PACKAGE_REPLACED"/>' in with_package
    assert "BOOT_COMPLETED" not in with_package


def test_no_scheme_filter_without_package_actions():
    xml = render_manifest(Settings(), ["android.intent.action.BOOT_COMPLETED"])
    assert len(_filters(xml)) == 1
    assert "android:scheme" not in xml
