from __future__ import annotations

import subprocess
import tempfile
import unittest
from unittest import mock
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from abi_linker_core.errors import ResolutionError  # noqa: E402
from abi_linker_core.shared_object import (  # noqa: E402
    ELF_MAGIC,
    SharedObjectParser,
    parse_nm_symbols,
    parse_readelf_symbols,
)

READELF_OUTPUT = """
Symbol table '.dynsym' contains 9 entries:
   Num:    Value          Size Type    Bind   Vis      Ndx Name
     0: 0000000000000000     0 NOTYPE  LOCAL  DEFAULT  UND
     1: 0000000000000000     0 FUNC    GLOBAL DEFAULT  UND free@GLIBC_2.2.5 (2)
     2: 0000000000001139    11 FUNC    GLOBAL DEFAULT   14 foo
     3: 0000000000004010     4 OBJECT  GLOBAL DEFAULT   24 foo_counter
     4: 0000000000001150    11 FUNC    WEAK   DEFAULT   14 bar@@LIBFOO_1.0
     5: 0000000000001160    11 FUNC    GLOBAL HIDDEN    14 hidden_fn
     6: 0000000000000000     4 TLS     GLOBAL DEFAULT   20 tls_var
     7: 0000000000001170     8 IFUNC   GLOBAL DEFAULT   14 fast_copy
     8: 0000000000000000     0 OBJECT  GLOBAL DEFAULT  ABS LIBFOO_1.0
"""

NM_OUTPUT = """0000000000001139 T foo
0000000000004010 D foo_counter
0000000000001150 W bar@@LIBFOO_1.0
0000000000004020 B foo_buffer
0000000000001170 i fast_copy
0000000000000000 A LIBFOO_1.0
0000000000001180 t local_fn
"""


class SymbolTableParsingTests(unittest.TestCase):
    def test_readelf_output_is_split_into_functions_and_objects(self) -> None:
        functions, objects = parse_readelf_symbols(READELF_OUTPUT)
        self.assertEqual(functions, {"foo", "bar", "fast_copy"})
        self.assertEqual(objects, {"foo_counter", "tls_var"})

    def test_nm_output_is_split_into_functions_and_objects(self) -> None:
        functions, objects = parse_nm_symbols(NM_OUTPUT)
        self.assertEqual(functions, {"foo", "bar", "fast_copy"})
        self.assertEqual(objects, {"foo_counter", "foo_buffer"})


class SharedObjectParserTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.so_path = self.root / "libfoo.so"
        self.so_path.write_bytes(ELF_MAGIC + b"\x02\x01\x01" + b"\x00" * 57)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_create_rejects_non_elf_files(self) -> None:
        text_file = self.root / "libfoo.txt"
        text_file.write_text("not an object\n", encoding="utf-8")
        self.assertIsNone(SharedObjectParser.create(text_file))

    def test_create_fails_for_missing_file(self) -> None:
        with self.assertRaises(ResolutionError):
            SharedObjectParser.create(self.root / "missing.so")

    def test_extract_uses_first_working_tool(self) -> None:
        def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
            if command[0] == "readelf":
                raise subprocess.CalledProcessError(1, command, output="", stderr="readelf: broken")
            return subprocess.CompletedProcess(command, 0, stdout=NM_OUTPUT, stderr="")

        available = {"readelf", "nm"}
        with mock.patch(
            "abi_linker_core.shared_object.shutil.which",
            side_effect=lambda exe: f"/usr/bin/{exe}" if exe in available else None,
        ), mock.patch("abi_linker_core.shared_object.subprocess.run", side_effect=fake_run) as run_mock:
            parser = SharedObjectParser.create(self.so_path)
            assert parser is not None
            parser.extract_symbols()

        self.assertEqual(parser.tool, "nm")
        self.assertEqual(parser.functions, {"foo", "bar", "fast_copy"})
        self.assertEqual(parser.global_vars, {"foo_counter", "foo_buffer"})
        self.assertEqual(run_mock.call_count, 2)

    def test_extract_without_tools_fails(self) -> None:
        parser = SharedObjectParser(self.so_path)
        with mock.patch("abi_linker_core.shared_object.shutil.which", return_value=None):
            with self.assertRaises(ResolutionError):
                parser.extract_symbols()

    def test_extract_reports_tool_failures(self) -> None:
        parser = SharedObjectParser(self.so_path)
        error = subprocess.CalledProcessError(1, ["readelf"], output="", stderr="not a dynamic object")
        with mock.patch("abi_linker_core.shared_object.shutil.which", return_value="/usr/bin/tool"), mock.patch(
            "abi_linker_core.shared_object.subprocess.run", side_effect=error
        ):
            with self.assertRaises(ResolutionError) as ctx:
                parser.extract_symbols()
        self.assertIn("not a dynamic object", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
