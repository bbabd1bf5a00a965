"""Accessors for the outbound clients built in PortalConfig.ready()."""

from django.apps import apps


def get_storage():
    return apps.get_app_config("portal").storage


def get_notifier():
    return apps.get_app_config("portal").notifier
