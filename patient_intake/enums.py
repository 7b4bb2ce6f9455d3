"""Enumerations for the patient intake pipeline."""

from enum import Enum


class InputField(Enum):
    """Field names expected on each raw patient record.

    Fields
    ------
    DATE_OF_BIRTH : str
        ``dob``; a date string or a spreadsheet day-serial.
    PATIENT_ID : str
        ``patient-id``; optional ``*`` marker followed by digits.
    SERVICE_DATE : str
        ``service-date``; a date string or a spreadsheet day-serial.
    """

    DATE_OF_BIRTH = "dob"
    PATIENT_ID = "patient-id"
    SERVICE_DATE = "service-date"

    @classmethod
    def all_values(cls) -> list[str]:
        """Get the input column names in declaration order.

        Examples
        --------
        >>> InputField.all_values()
        ['dob', 'patient-id', 'service-date']
        """
        return [item.value for item in cls]


class SourceKind(Enum):
    """Where raw patient records are read from."""

    URL = "url"
    FILE = "file"

    @classmethod
    def from_string(cls, value: str | None) -> "SourceKind":
        """Convert string to SourceKind.

        Parameters
        ----------
        value : str | None
            Source kind name ('url', 'file'), or None for default (FILE).

        Returns
        -------
        SourceKind
            Corresponding SourceKind enum, defaults to FILE if value is None.

        Raises
        ------
        ValueError
            If value is not a valid source kind.
        """
        if value is None:
            return cls.FILE

        value_lower = value.lower()
        for kind in cls:
            if kind.value == value_lower:
                return kind

        raise ValueError(
            f"Unknown source kind: {value}. "
            f"Valid options: {', '.join(k.value for k in cls)}"
        )

    @classmethod
    def detect(cls, source: str) -> "SourceKind":
        """Classify a CLI source argument as a URL or a local file path.

        Examples
        --------
        >>> SourceKind.detect("https://example.org/patients")
        <SourceKind.URL: 'url'>

        >>> SourceKind.detect("input/patients.json")
        <SourceKind.FILE: 'file'>
        """
        if source.lower().startswith(("http://", "https://")):
            return cls.URL
        return cls.FILE
