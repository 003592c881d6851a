"""Android resource materializers: launcher icons, splash theme, resource files."""
