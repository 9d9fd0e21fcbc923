"""
Column Mapper - resolves canonical lead fields from free-form headers.

Exports from the CRM, hand-maintained Excel sheets and the JSON API all name
the same column differently: with or without Turkish diacritics, upper-cased,
or split over two lines because of merged header cells. Each canonical field
owns an alias list in priority order; the first alias carrying a non-blank
value wins.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .text import as_text, header_key, is_blank


CUSTOMER_NAME_ALIASES = [
    "Müşteri Adı Soyadı",
    "Müşteri Adı\nSoyadı",
    "Musteri Adi Soyadi",
    "Müşteri Adı",
    "customerName",
    "name",
    "Name",
]

REQUEST_DATE_ALIASES = [
    "Talep Geliş Tarihi",
    "Talep Geliş\nTarihi",
    "Talep Gelis Tarihi",
    "Talep Tarihi",
    "requestDate",
    "date",
]

ASSIGNED_PERSONNEL_ALIASES = [
    "Atanan Personel",
    "Satış Temsilcisi",
    "Satis Temsilcisi",
    "assignedPersonnel",
    "salesRep",
]

LEAD_TYPE_ALIASES = [
    "Lead Tipi",
    "leadType",
]

WEB_FORM_NOTE_ALIASES = [
    "WebForm Notu",
    "Web Form Notu",
    "webFormNote",
]

PROJECT_NAME_ALIASES = [
    "Proje Adı",
    "Proje",
    "Project Name",
    "projectName",
]

# Sole source of a lead's status
LAST_MEETING_RESULT_ALIASES = [
    "SON GORUSME SONUCU",
    "SON GÖRÜŞME SONUCU",
    "Son Görüşme Sonucu",
    "SON GORUSME\nSONUCU",
    "lastMeetingResult",
]

FIELD_ALIASES: Dict[str, List[str]] = {
    "customer_name": CUSTOMER_NAME_ALIASES,
    "request_date": REQUEST_DATE_ALIASES,
    "assigned_personnel": ASSIGNED_PERSONNEL_ALIASES,
    "lead_type": LEAD_TYPE_ALIASES,
    "web_form_note": WEB_FORM_NOTE_ALIASES,
    "project_name": PROJECT_NAME_ALIASES,
    "last_meeting_result": LAST_MEETING_RESULT_ALIASES,

    "customer_id": ["Müşteri ID", "Musteri ID", "customerId"],
    "contact_id": ["İletişim ID", "Iletisim ID", "contactId"],
    "first_customer_source": ["İlk Müşteri Kaynağı", "firstCustomerSource"],
    "form_customer_source": ["Form Müşteri Kaynağı", "formCustomerSource"],
    "info_form_location_1": ["İnfo Form Geliş Yeri", "infoFormLocation1"],
    "info_form_location_2": ["İnfo Form Geliş Yeri 2", "infoFormLocation2"],
    "info_form_location_3": ["İnfo Form Geliş Yeri 3", "infoFormLocation3"],
    "info_form_location_4": ["İnfo Form Geliş Yeri 4", "infoFormLocation4"],
    "reminder_personnel": [
        "Hatırlatma Personeli",
        "Hatıırlatma Personeli",  # misspelled in the CRM export template
        "reminderPersonnel",
    ],
    "was_called_back": [
        "GERİ DÖNÜŞ YAPILDI MI? (Müşteri Arandı mı?)",
        "GERİ DÖNÜŞ YAPILDI MI?\n(Müşteri Arandı mı?)",
        "wasCalledBack",
    ],
    "web_form_pool_date": ["Web Form Havuz Oluşturma Tarihi", "webFormPoolDate"],
    "form_system_date": [
        "Form Sistem Olusturma Tarihi",
        "Form Sistem Oluşturma Tarihi",
        "formSystemDate",
    ],
    "assignment_time_diff": ["Atama Saat Farkı", "assignmentTimeDiff"],
    "response_time_diff": ["Dönüş Saat Farkı", "responseTimeDiff"],
    "outgoing_call_system_date": [
        "Giden Arama Sistem Oluşturma Tarihi",
        "outgoingCallSystemDate",
    ],
    "customer_response_date": [
        "Müşteri Geri Dönüş Tarihi (Giden Arama)",
        "customerResponseDate",
    ],
    "was_email_sent": [
        "GERİ DÖNÜŞ YAPILDI MI? (Müşteriye Mail Gönderildi mi?)",
        "GERİ DÖNÜŞ YAPILDI MI?\n(Müşteriye Mail Gönderildi mi?)",
        "wasEmailSent",
    ],
    "customer_email_response_date": [
        "Müşteri Mail Geri Dönüş Tarihi",
        "customerEmailResponseDate",
    ],
    "unreachable_by_phone": ["Telefonla Ulaşılamayan Müşteriler", "unreachableByPhone"],
    "days_waiting_response": ["Kaç Gündür Geri Dönüş Bekliyor", "daysWaitingResponse"],
    "days_to_response": ["Kaç Günde Geri Dönüş Yapılmış (Süre)", "daysToResponse"],
    "call_note": [
        "GERİ DÖNÜŞ NOTU (Giden Arama Notu)",
        "GERİ DÖNÜŞ NOTU\n(Giden Arama Notu)",
        "Arama Notu",
        "callNote",
    ],
    "email_note": [
        "GERİ DÖNÜŞ NOTU (Giden Mail Notu)",
        "GERİ DÖNÜŞ NOTU\n(Giden Mail Notu)",
        "emailNote",
    ],
    "one_on_one_meeting": [
        "Birebir Görüşme Yapıldı mı ?",
        "Birebir Görüşme Yapıldı mı?",
        "oneOnOneMeeting",
    ],
    "meeting_date": ["Birebir Görüşme Tarihi", "meetingDate"],
    "response_result": ["Dönüş Görüşme Sonucu", "responseResult"],
    "negative_reason": ["Dönüş Olumsuzluk Nedeni", "negativeReason"],
    "was_sale_made": [
        "Müşteriye Satış Yapıldı Mı ?",
        "Müşteriye Satış Yapıldı Mı?",
        "wasSaleMade",
    ],
    "sale_count": ["Satış Adedi", "saleCount"],
    "appointment_date": ["Randevu Tarihi", "appointmentDate"],
    "last_meeting_note": [
        "SON GORUSME NOTU",
        "SON GÖRÜŞME NOTU",
        "Son Görüşme Notu",
        "lastMeetingNote",
    ],
}


class ColumnMapper:
    """
    Looks up canonical fields in rows keyed by arbitrary header spellings.

    Usage:
        mapper = ColumnMapper()
        name = mapper.resolve(row, CUSTOMER_NAME_ALIASES)
        values = mapper.map_fields(row)
    """

    def __init__(self, custom_aliases: Optional[Dict[str, List[str]]] = None):
        """
        Args:
            custom_aliases: Extra header spellings per field, tried after
                the built-in ones
        """
        self.field_aliases = {name: list(aliases) for name, aliases in FIELD_ALIASES.items()}
        if custom_aliases:
            for name, aliases in custom_aliases.items():
                self.field_aliases.setdefault(name, []).extend(aliases)

    def resolve(self, row: Mapping[str, Any], aliases: Sequence[str]) -> str:
        """Return the first non-blank value under any alias, else ""."""
        folded: Optional[Dict[str, Any]] = None

        for alias in aliases:
            value = row.get(alias)
            if is_blank(value):
                if folded is None:
                    folded = self._folded_row(row)
                value = folded.get(header_key(alias))
            if not is_blank(value):
                return as_text(value)

        return ""

    def map_fields(self, row: Mapping[str, Any]) -> Dict[str, str]:
        """Resolve every known field; missing fields map to ""."""
        return {name: self.resolve(row, aliases) for name, aliases in self.field_aliases.items()}

    def has_value(self, row: Mapping[str, Any], aliases: Sequence[str]) -> bool:
        return bool(self.resolve(row, aliases))

    @staticmethod
    def _folded_row(row: Mapping[str, Any]) -> Dict[str, Any]:
        folded: Dict[str, Any] = {}
        for header, value in row.items():
            key = header_key(header)
            # First non-blank spelling of a header wins
            if key not in folded or is_blank(folded[key]):
                folded[key] = value
        return folded
