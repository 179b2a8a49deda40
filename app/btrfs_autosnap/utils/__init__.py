"""Utility modules for btrfs-auto-snapshot.

Shell execution lives in ``utils.shell`` and Rich console helpers in
``utils.formatting``. The console helpers load the theme from settings,
so they are not imported here.
"""
