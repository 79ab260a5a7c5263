"""
Service layer: model server client, chat relay and practice mode.
"""
