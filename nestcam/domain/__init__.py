"""Domain layer: camera configuration, stream kinds and API constants"""
