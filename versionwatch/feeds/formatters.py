from versionwatch.feeds.models import VersionRecord


def format_minecraft_version(record: VersionRecord) -> str:
    """Анонс новой версии игры из launcher manifest"""
    return f"A new {record.kind or 'unknown'} version of minecraft was just released! : {record.id}"


def format_jira_version(record: VersionRecord) -> str:
    """Анонс новой версии в баг-трекере"""
    return f"A new version ({record.name}) has been added to the minecraft issue tracker!"
