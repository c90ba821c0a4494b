from os import path

_version_file = path.join(path.dirname(path.abspath(__file__)), "VERSION")

with open(_version_file, "r", encoding="utf-8") as fp:
    __version__ = fp.read().strip()
