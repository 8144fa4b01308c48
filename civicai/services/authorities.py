"""
Authority Registry - static, read-only reference data

Maps the category label returned by the detection agent to a concrete
authority. Unknown categories resolve to the configured default authority.
"""
from typing import Dict, List, Optional, Union

from civicai.config import get_settings, Settings
from civicai.models.ticket import Authority, AuthorityCategory
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


AUTHORITIES: List[Authority] = [
    Authority(
        id="auth_muni",
        name="City Municipal Corporation",
        category=AuthorityCategory.CORPORATION,
        email="commissioner@citycorp.gov",
        whatsapp="15550109999",
    ),
    Authority(
        id="auth_water",
        name="Metro Water Supply Board",
        category=AuthorityCategory.WATER_BOARD,
        email="helpdesk@metrowater.gov",
        whatsapp="15550123456",
    ),
    Authority(
        id="auth_elec",
        name="State Electricity Board",
        category=AuthorityCategory.ELECTRICITY_BOARD,
        email="outage@electricity.gov",
        whatsapp="15550198888",
    ),
    Authority(
        id="auth_police",
        name="Traffic Police Dept",
        category=AuthorityCategory.TRAFFIC_POLICE,
        email="traffic@police.gov",
        whatsapp="15550112222",
    ),
]


class AuthorityRegistry:
    """Lookup over the static authority list"""

    def __init__(
        self,
        authorities: Optional[List[Authority]] = None,
        settings: Optional[Settings] = None
    ):
        """
        Args:
            authorities: Registry contents (defaults to AUTHORITIES)
            settings: Settings providing default_authority_id
        """
        settings = settings or get_settings()
        self._authorities = list(authorities if authorities is not None else AUTHORITIES)
        if not self._authorities:
            raise ValueError("Authority registry cannot be empty")
        self._by_id: Dict[str, Authority] = {a.id: a for a in self._authorities}

        default = self._by_id.get(settings.default_authority_id)
        if default is None:
            logger.warning(
                f"Default authority '{settings.default_authority_id}' not in registry, "
                f"using '{self._authorities[0].id}'"
            )
            default = self._authorities[0]
        self.default = default

    def all(self) -> List[Authority]:
        return list(self._authorities)

    def get(self, authority_id: str) -> Optional[Authority]:
        return self._by_id.get(authority_id)

    @property
    def default_category(self) -> AuthorityCategory:
        """Category reported by the detection fallback"""
        return self.default.category

    def resolve(self, authority_type: Union[AuthorityCategory, str, None]) -> Authority:
        """
        Resolve a category label to an authority.

        Args:
            authority_type: Category returned by detection (enum or raw label)

        Returns:
            First authority of that category, else the default authority
        """
        label = authority_type.value if isinstance(authority_type, AuthorityCategory) else authority_type
        for authority in self._authorities:
            if authority.category.value == label:
                return authority

        logger.info(f"No authority for category '{label}', routing to default '{self.default.id}'")
        return self.default
