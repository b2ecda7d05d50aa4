from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .version_script import parse_api_level


@dataclass(frozen=True)
class LinkerConfig:
    dump_files: tuple[Path, ...]
    output_path: Path
    so_file: Path | None
    export_dirs: tuple[str, ...] = ()
    version_script: Path | None = None
    arch: str = ""
    api: str = ""
    use_version_script: bool = False

    @property
    def header_filter_enabled(self) -> bool:
        return bool(self.export_dirs)

    @property
    def use_symbol_matching(self) -> bool:
        return self.version_script is not None or self.so_file is not None

    def validate(self) -> None:
        if not self.dump_files:
            raise ConfigurationError("At least one input dump file is required.")
        if self.use_version_script:
            if self.version_script is None:
                raise ConfigurationError("--use-version-script requires a version script (-v).")
            parse_api_level(self.api)
        elif self.so_file is None:
            raise ConfigurationError("A shared object (-so) is required unless --use-version-script is given.")


def config_from_args(args: argparse.Namespace) -> LinkerConfig:
    export_dirs: tuple[str, ...] = () if args.no_filter else tuple(args.export_dirs or ())
    config = LinkerConfig(
        dump_files=tuple(Path(item) for item in args.dump_files),
        output_path=Path(args.output),
        so_file=Path(args.so_file) if args.so_file else None,
        export_dirs=export_dirs,
        version_script=Path(args.version_script) if args.version_script else None,
        arch=args.arch or "",
        api=args.api or "",
        use_version_script=bool(args.use_version_script),
    )
    config.validate()
    return config
