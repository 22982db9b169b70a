"""
Configuration

Environment-driven settings. Submodules are imported directly
(``fieldcrm.config.redis_config``) so that loading settings never pulls in
client libraries that are not needed.
"""
