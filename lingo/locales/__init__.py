"""Locale package for translation JSON resources.

Each ``<locale>.json`` file holds one nested catalog; the file stem is the
locale id. The files are read via importlib.resources so they stay
discoverable both from a checkout and from an installed wheel.
"""
