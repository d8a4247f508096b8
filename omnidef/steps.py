import shlex

from omnidef import filesystem as fs
from omnidef import log
from omnidef import utils
from omnidef.error import BuildError, CommandError, TimeoutError
from omnidef.error import ConfigureFailedError, MakeFailedError, InstallFailedError


class Step(object):
    """
    A single command in a build procedure.

    Steps are rendered into an argument list against a build context and
    executed in the context's source directory with the context's
    environment. A failing command is reported as the step's error type.
    """

    error = BuildError

    def command(self, context):
        raise NotImplementedError()

    def execute(self, software, tools, context):
        cmd = self.command(context)
        log.info("[{0}] {1}", software, " ".join(cmd))
        try:
            tools.run(cmd, output=True)
        except (CommandError, TimeoutError) as exc:
            if not isinstance(exc, CommandError):
                exc = CommandError(str(exc))
            raise self.error.from_command_error(software, exc) from exc

    def __repr__(self):
        return "{0}()".format(type(self).__name__)


class Configure(Step):
    """ Runs the ``configure`` script of the source tree. """

    error = ConfigureFailedError

    def __init__(self, options=None, script="configure"):
        self.options = utils.as_list(options)
        self.script = script

    def render_options(self, context):
        return [context.expand(option) for option in self.options]

    def command(self, context):
        return [fs.path.join(context.source_dir, self.script)] + self.render_options(context)

    def __repr__(self):
        return "Configure({0!r})".format(self.options)


class Make(Step):
    """ Runs ``make`` with the given arguments. """

    error = MakeFailedError

    def __init__(self, args=None):
        self.args = utils.as_list(args)

    def command(self, context):
        cmd = ["make"]
        for arg in self.args:
            cmd += shlex.split(context.expand(arg))
        return cmd

    def __repr__(self):
        return "Make({0!r})".format(self.args)


class Install(Make):
    """ Runs ``make install``. """

    error = InstallFailedError

    def __init__(self, target="install"):
        super().__init__(target)
