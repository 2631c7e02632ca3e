"""
Send a message to your Twitch chat from the command line.
"""
