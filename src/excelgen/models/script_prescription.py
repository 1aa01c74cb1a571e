from __future__ import annotations

from dataclasses import dataclass

"""ScriptPrescription model: what to generate and from which template.

Created fresh for each generation request. The generator reads it once;
nothing keeps a reference afterwards.
"""

__all__ = [
    "ScriptPrescription",
]


@dataclass
class ScriptPrescription:
    """Parameter object describing one generated source file.

    ``template`` holds an already resolved template body. When it is None the
    generator resolves ``template_name`` through a TemplateStore.
    """
    class_name: str
    data_class_name: str = ""
    worksheet_class_name: str = ""
    imported_file_path: str = ""  # 元スプレッドシートのパス
    asset_file_path: str = ""  # 生成される .asset のパス
    asset_postprocessor_class: str = ""
    file_name: str = ""  # 空なら <worksheet>AssetPostprocessor.cs
    template_name: str = "PostProcessor"
    template: str | None = None
    fields: str = ""  # データクラス用のフィールド宣言 (描画済)

    def __post_init__(self) -> None:
        if not self.worksheet_class_name:
            self.worksheet_class_name = self.class_name
        if not self.asset_postprocessor_class:
            self.asset_postprocessor_class = f"{self.worksheet_class_name}AssetPostprocessor"
        if not self.file_name:
            self.file_name = f"{self.asset_postprocessor_class}.cs"
