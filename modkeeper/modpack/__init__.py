"""Modpack lookup, archive handling and the Modrinth and CurseForge pack formats."""