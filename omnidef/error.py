class OmnidefError(Exception):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class CommandError(OmnidefError):
    def __init__(self, what, stdout=None, stderr=None, returncode=None, *args, **kwargs):
        super().__init__(what, *args, **kwargs)
        self.stdout = stdout if stdout is not None else []
        self.stderr = stderr if stderr is not None else []
        self.returncode = returncode


class TimeoutError(OmnidefError):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

    def __str__(self):
        return super().__str__() or "Timeout"


class UnknownSoftwareError(OmnidefError):
    def __init__(self, name):
        super().__init__("No such software definition: '{0}'".format(name))
        self.name = name


class UnknownVersionError(OmnidefError):
    def __init__(self, name, version, known=None):
        known = sorted(known or [])
        super().__init__(
            "Unknown version '{0}' of '{1}' (declared: {2})".format(
                version, name, ", ".join(known) or "none"))
        self.name = name
        self.version = version
        self.known = known


class IntegrityMismatchError(OmnidefError):
    def __init__(self, what, expected, actual):
        super().__init__(
            "SHA256 hash mismatch for {0}: expected {1}, got {2}".format(what, expected, actual))
        self.expected = expected
        self.actual = actual


class BuildError(CommandError):
    """ A build step exited with a non-zero status. """

    step = "build"

    @classmethod
    def from_command_error(cls, software, exc):
        message = "{0} step failed for '{1}': {2}".format(cls.step.capitalize(), software, exc)
        if exc.stderr:
            message += "\n" + "\n".join(exc.stderr)
        return cls(message, exc.stdout, exc.stderr, exc.returncode)


class ConfigureFailedError(BuildError):
    step = "configure"


class MakeFailedError(BuildError):
    step = "make"


class InstallFailedError(BuildError):
    step = "install"


def raise_error(msg, *args, **kwargs):
    raise OmnidefError(msg.format(*args, **kwargs))


def raise_error_if(condition, *args, **kwargs):
    if condition:
        raise_error(*args, **kwargs)
