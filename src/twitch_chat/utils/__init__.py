"""
Twitch OAuth, Helix API and credential store helpers.
"""
