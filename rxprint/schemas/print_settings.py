# FILE: rxprint/schemas/print_settings.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rxprint.services.paper import PaperName

# editing range for the reserved letterhead space (mm)
HEIGHT_MIN_MM = 10
HEIGHT_MAX_MM = 100


class _CamelModel(BaseModel):
    # stored blob uses the client's camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HeaderSettings(_CamelModel):
    # language A (left, LTR)
    doctor_name_en: str = ""
    title_en: str = ""
    bio_en: str = ""
    # language B (right, RTL)
    doctor_name_fa: str = ""
    title_fa: str = ""
    bio_fa: str = ""

    logo_url: Optional[str] = ""
    show_logo: bool = False


class FooterSettings(_CamelModel):
    address: str = ""
    phone: str = ""
    email: str = ""
    signature_name: str = ""
    signature_title: str = ""


class PrintSettings(_CamelModel):
    """
    Header/footer/paper configuration handed to every render call.

    header_height / footer_height (mm) only apply while the matching
    show flag is off (pre-printed letterhead stock).
    """
    header: HeaderSettings = Field(default_factory=HeaderSettings)
    footer: FooterSettings = Field(default_factory=FooterSettings)
    page_size: PaperName = "A4"
    show_header: bool = True
    show_footer: bool = True
    header_height: float = 35
    footer_height: float = 45

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True)


class PrintSettingsUpdate(_CamelModel):
    """Used for PUT /print-settings (partial update)."""
    header: Optional[HeaderSettings] = None
    footer: Optional[FooterSettings] = None
    page_size: Optional[PaperName] = None
    show_header: Optional[bool] = None
    show_footer: Optional[bool] = None
    header_height: Optional[float] = Field(default=None,
                                           ge=HEIGHT_MIN_MM,
                                           le=HEIGHT_MAX_MM)
    footer_height: Optional[float] = Field(default=None,
                                           ge=HEIGHT_MIN_MM,
                                           le=HEIGHT_MAX_MM)


def get_default_settings() -> PrintSettings:
    return PrintSettings(
        header=HeaderSettings(
            doctor_name_en="Dr. John Smith",
            title_en="MD, General Practitioner",
            bio_en="Specialist in Family Medicine",
            doctor_name_fa="داکتر جان اسمیت",
            title_fa="متخصص طب عمومی",
            bio_fa="متخصص طب خانواده",
            logo_url="",
            show_logo=False,
        ),
        footer=FooterSettings(
            address="123 Medical Center, Kabul, Afghanistan",
            phone="+93 700 123 456",
            email="doctor@clinic.com",
            signature_name="Dr. John Smith",
            signature_title="General Practitioner",
        ),
        page_size="A4",
        show_header=True,
        show_footer=True,
        header_height=35,
        footer_height=45,
    )


def merge_settings(base: PrintSettings,
                   patch: dict,
                   *,
                   by_alias: bool = False) -> PrintSettings:
    """
    Overlay `patch` on `base`; header/footer dicts are merged field by
    field. `by_alias` selects camelCase keys (stored blob) or field names.
    """
    data = base.model_dump(by_alias=by_alias)
    for k, v in patch.items():
        if isinstance(v, dict) and isinstance(data.get(k), dict):
            data[k] = {**data[k], **v}
        else:
            data[k] = v
    return PrintSettings.model_validate(data)
