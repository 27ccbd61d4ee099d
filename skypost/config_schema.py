from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .split import MAX_POST_GRAPHEME_LENGTH, MAX_WORD_LENGTH, SplitOptions

_LANG_RE = re.compile(r"^[A-Za-z]{2,3}(-[A-Za-z0-9]{1,8})*$")

PositiveInt = Annotated[int, Field(ge=1)]


class SplitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_length: PositiveInt = MAX_POST_GRAPHEME_LENGTH
    max_word_length: PositiveInt = MAX_WORD_LENGTH
    numbering_format: str = "[{index}/{total}]"
    placement: Literal["prefix", "suffix"] = "prefix"

    @field_validator("numbering_format")
    @classmethod
    def _format_needs_placeholders(cls, v: str) -> str:
        if "{index}" not in v or "{total}" not in v:
            raise ValueError("must contain {index} and {total} placeholders")
        try:
            v.format(index=1, total=1)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"is not a valid format string: {e}") from e
        return v

    @model_validator(mode="after")
    def _word_must_fit(self) -> "SplitConfig":
        if self.max_word_length >= self.max_length:
            raise ValueError("max_word_length must be < max_length")
        return self

    def to_options(self) -> SplitOptions:
        fmt = self.numbering_format
        return SplitOptions(
            max_length=self.max_length,
            numbering=lambda index, total: fmt.format(index=index, total=total),
            placement=self.placement,
            max_word_length=self.max_word_length,
        )


class TextImportConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    resolve_tags: bool = True
    check_url_hosts: bool = False


class OutputConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    languages: list[str] = Field(default_factory=list)

    @field_validator("languages")
    @classmethod
    def _normalize_languages(cls, v: list[str]) -> list[str]:
        out: list[str] = []
        for item in v:
            code = (item or "").strip()
            if not code:
                continue
            if not _LANG_RE.fullmatch(code):
                raise ValueError(f"invalid language code: {code!r}")
            if code not in out:
                out.append(code)
        return out


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    split: SplitConfig = Field(default_factory=SplitConfig)
    text_import: TextImportConfig = Field(default_factory=TextImportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
