from omnidef.pkgs import readline  # noqa: F401
