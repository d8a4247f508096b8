from omnidef.registry import SoftwareRegistry
from omnidef.software import Autotools


class Readline(Autotools):
    name = "readline"
    default_version = "6.3"

    license = "GPLv3+"
    license_file = "COPYING"
    skip_transitive_dependency_licensing = True

    versions = {
        "6.3": "56ba6071b9462f980c5a72ab0023893b65ba6debb4eeb475d7a563dc65cafd43",
        "8.0": "e339f51971478d369f8a053a330a190781acb9864cf4c541060f12078948e461",
    }

    source_url = "ftp://ftp.gnu.org/gnu/readline/readline-{version}.tar.gz"
    relative_path = "readline-{version}"


SoftwareRegistry.get().add_software_class(Readline)
