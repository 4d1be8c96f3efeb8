"""Manage Minecraft mods and modpacks from Modrinth, CurseForge and GitHub Releases."""

__version__ = "1.0.0"