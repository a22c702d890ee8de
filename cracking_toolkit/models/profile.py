"""
Target profile data model for heuristic guessing
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..interfaces import MissingRequiredProfileField, InputValidationError


@dataclass(frozen=True)
class TargetProfile:
    """Personal details a user might build a password from"""
    name: str
    dob: Optional[str] = None
    phone: Optional[str] = None
    pet_name: Optional[str] = None
    company: Optional[str] = None

    def validate(self):
        """
        Validate required fields

        Raises:
            MissingRequiredProfileField: If ``name`` is missing or blank
            InputValidationError: If an optional field is not a string
        """
        if not isinstance(self.name, str) or not self.name.strip():
            raise MissingRequiredProfileField('name')
        for field_name in ('dob', 'phone', 'pet_name', 'company'):
            value = getattr(self, field_name)
            if value is not None and not isinstance(value, str):
                raise InputValidationError(f"Profile field '{field_name}' must be a string")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TargetProfile':
        """Build a profile from a mapping using snake_case or camelCase keys"""
        profile = cls(
            name=data.get('name') or '',
            dob=data.get('dob') or None,
            phone=data.get('phone') or None,
            pet_name=data.get('pet_name') or data.get('petName') or None,
            company=data.get('company') or None,
        )
        profile.validate()
        return profile

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}
