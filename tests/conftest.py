import os

# versionwatch.config builds Settings() on import, required values must exist first
os.environ.setdefault("BOTX_BOT_ID", "8dada2c8-67a6-5434-9dec-570d244e78ee")
os.environ.setdefault("BOTX_SECRET_KEY", "secret")
