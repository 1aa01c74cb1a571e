from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from ..models.header_column import HeaderColumn
from ..models.machine import ExcelMachine
from ..models.script_prescription import ScriptPrescription

"""Template-driven C# script generation.

Templates are plain text files named ``<identifier>.txt``. Placeholders use
the ``<<name>>`` form and are replaced by ScriptPrescription fields;
placeholders with no matching field are left as they are.
"""

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_SUFFIX = ".txt"
SCRIPT_SUFFIX = ".cs"

PLACEHOLDER_RE = re.compile(r"<<(\w+)>>")

# placeholder -> ScriptPrescription attribute
PLACEHOLDER_FIELDS = {
    "className": "class_name",
    "dataClassName": "data_class_name",
    "worksheetClassName": "worksheet_class_name",
    "importedFilePath": "imported_file_path",
    "assetFilepath": "asset_file_path",
    "assetPostprocessorClass": "asset_postprocessor_class",
    "fields": "fields",
}

_IDENTIFIER_RE = re.compile(r"\W")


class GenerationError(Exception):
    """Base exception for script generation failures."""

class TemplateResolutionError(GenerationError):
    """Raised when a named template cannot be found."""

class WriteError(GenerationError):
    """Raised when a generated file cannot be written."""


class TemplateStore:
    """Resolve template identifiers to template bodies.

    Directories are searched in order; the bundled templates are always
    searched last.
    """

    def __init__(self, search_paths: Iterable[Path | str] = ()) -> None:
        paths = [Path(p) for p in search_paths if str(p)]
        if BUNDLED_TEMPLATES not in paths:
            paths.append(BUNDLED_TEMPLATES)
        self.search_paths = paths

    def resolve(self, identifier: str) -> str:
        for directory in self.search_paths:
            candidate = directory / f"{identifier}{TEMPLATE_SUFFIX}"
            if candidate.is_file():
                try:
                    return candidate.read_text(encoding="utf-8")
                except OSError as e:
                    raise TemplateResolutionError(f"failed to read template {candidate}: {e}") from e
        searched = ", ".join(str(p) for p in self.search_paths)
        raise TemplateResolutionError(f"template '{identifier}' not found (searched: {searched})")


def render_template(body: str, prescription: ScriptPrescription) -> str:
    """Substitute ``<<name>>`` placeholders with prescription fields."""

    def _sub(match: re.Match[str]) -> str:
        attr = PLACEHOLDER_FIELDS.get(match.group(1))
        if attr is None:
            return match.group(0)
        return str(getattr(prescription, attr))

    return PLACEHOLDER_RE.sub(_sub, body)


def generate_script(
    prescription: ScriptPrescription,
    output_dir: Path | str,
    store: TemplateStore | None = None,
) -> Path:
    """Render one prescription and write it to ``output_dir / file_name``.

    An existing file at the target path is overwritten.

    Raises:
        TemplateResolutionError: template not found
        WriteError: the directory could not be created or the file written
    """
    body = prescription.template
    if body is None:
        body = (store or TemplateStore()).resolve(prescription.template_name)
    text = render_template(body, prescription)

    directory = Path(output_dir)
    target = directory / prescription.file_name
    try:
        directory.mkdir(parents=True, exist_ok=True)
        # 改行コードはテンプレートのまま (newline="" で変換しない)
        with target.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise WriteError(f"failed to write {target}: {e}") from e
    logger.debug(f"wrote {target}")
    return target


# C# の予約語 (フィールド名に使う場合は @ を付ける)
CSHARP_KEYWORDS = frozenset("""
abstract as base bool break byte case catch char checked class const continue
decimal default delegate do double else enum event explicit extern false finally
fixed float for foreach goto if implicit in int interface internal is lock long
namespace new null object operator out override params private protected public
readonly ref return sbyte sealed short sizeof stackalloc static string struct
switch this throw true try typeof uint ulong unchecked unsafe ushort using
virtual void volatile while
""".split())


def _base_identifier(name: str) -> str:
    ident = _IDENTIFIER_RE.sub("_", name.strip())
    if not ident:
        ident = "_"
    if ident[0].isdigit():
        ident = "_" + ident
    return ident


def field_identifier(name: str) -> str:
    """Turn a column title into a C# field identifier (``"Max HP"`` -> ``"max_HP"``).

    Titles that become a C# keyword are escaped with ``@`` (``"Class"`` -> ``"@class"``).
    """
    ident = _base_identifier(name)
    ident = ident[0].lower() + ident[1:]
    return f"@{ident}" if ident in CSHARP_KEYWORDS else ident


def property_identifier(name: str) -> str:
    ident = _base_identifier(name)
    return ident[0].upper() + ident[1:]


def member_names(name: str) -> tuple[str, str]:
    """(field, property) names generated for one column title."""
    field_name = field_identifier(name)
    prop_name = property_identifier(name)
    if prop_name == field_name:
        prop_name = prop_name + "Value"
    return field_name, prop_name


def _check_member_clashes(columns: Iterable[HeaderColumn]) -> None:
    """Reject columns whose titles map onto the same C# member name."""
    owners: dict[str, list[str]] = {}
    for c in columns:
        for member in set(member_names(c.name)):
            owners.setdefault(member.lstrip("@"), []).append(c.name)
    clashes = sorted({tuple(names) for names in owners.values() if len(names) > 1})
    if clashes:
        detail = "; ".join(f"{', '.join(names)}" for names in clashes)
        raise GenerationError(f"columns map to the same C# member name: {detail}")


def render_fields(columns: Iterable[HeaderColumn], indent: str = "    ") -> str:
    """Render a serialized field plus accessor property per header column."""
    blocks = []
    for c in columns:
        cs_type = c.type.csharp_type
        field_name, prop_name = member_names(c.name)
        blocks.append(
            f"{indent}[SerializeField]\n"
            f"{indent}{cs_type} {field_name};\n"
            f"{indent}public {cs_type} {prop_name} {{ get {{return {field_name}; }} set {{ {field_name} = value;}} }}\n"
        )
    return "\n".join(blocks)


def _check_generatable(machine: ExcelMachine) -> str:
    worksheet = machine.worksheet_name
    if not worksheet:
        raise GenerationError("no worksheet selected")
    if not machine.has_header_columns():
        raise GenerationError(f"worksheet '{worksheet}' has no header columns; import it first")
    undefined = machine.undefined_columns()
    if undefined:
        raise GenerationError(f"columns with undefined type: {', '.join(undefined)}")
    _check_member_clashes(machine.header_columns)
    return worksheet


def build_prescriptions(machine: ExcelMachine) -> list[tuple[ScriptPrescription, Path]]:
    """Build (prescription, output directory) pairs for every script to generate.

    The data class always comes first. The ScriptableObject class, its
    editor and the AssetPostprocessor follow unless only the data class is
    requested.
    """
    worksheet = _check_generatable(machine)
    data_class = f"{worksheet}Data"
    runtime_dir = Path(machine.runtime_class_path)
    editor_dir = Path(machine.editor_class_path)

    def _sp(template_name: str, file_name: str, **extra: str) -> ScriptPrescription:
        return ScriptPrescription(
            class_name=worksheet,
            data_class_name=data_class,
            worksheet_class_name=worksheet,
            template_name=template_name,
            file_name=file_name,
            **extra,
        )

    result = [
        (_sp("DataClass", f"{data_class}{SCRIPT_SUFFIX}", fields=render_fields(machine.header_columns)), runtime_dir),
    ]
    if machine.only_create_data_class:
        return result

    # .asset はスプレッドシートと同じフォルダに作成
    asset_path = str(PurePosixPath(Path(machine.excel_file_path).as_posix()).parent / f"{worksheet}.asset")
    result.extend([
        (_sp("ScriptableObjectClass", f"{worksheet}{SCRIPT_SUFFIX}"), runtime_dir),
        (_sp("ScriptableObjectEditorClass", f"{worksheet}Editor{SCRIPT_SUFFIX}"), editor_dir),
        (
            _sp(
                "PostProcessor",
                f"{worksheet}AssetPostprocessor{SCRIPT_SUFFIX}",
                imported_file_path=machine.excel_file_path,
                asset_file_path=asset_path,
                asset_postprocessor_class=f"{worksheet}AssetPostprocessor",
            ),
            editor_dir,
        ),
    ])
    return result


def generate_all(machine: ExcelMachine, store: TemplateStore | None = None) -> list[Path]:
    """Generate every script for the machine's worksheet.

    Files are written one after another. A failure leaves files written
    before it in place; running again overwrites them.

    Returns:
        Paths of the generated files, in generation order
    """
    if store is None:
        store = TemplateStore([machine.template_path] if machine.template_path else [])
    written: list[Path] = []
    for prescription, output_dir in build_prescriptions(machine):
        written.append(generate_script(prescription, output_dir, store))
    logger.info(f"generated {len(written)} script(s) for {machine.worksheet_name}")
    return written
