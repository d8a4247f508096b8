import os


path = os.path
sep = os.sep
pathsep = os.pathsep


def userhome():
    return os.path.expanduser("~")


def makedirs(path):
    os.makedirs(path, exist_ok=True)


def unlink(path):
    os.unlink(path)
