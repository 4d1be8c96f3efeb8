"""Profiles, modpacks, filters and the JSON config file that holds them."""