"""
Claims carried by a signed-in user.

The base factory produces the usual identity claims (id, name, email,
security stamp, roles). ``AdditionalUserClaimsPrincipalFactory`` adds the
app's own ``Id`` and ``FullName`` claims on top.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from authdesk.identity import UserManager
from authdesk.models import User


class ClaimTypes:
    NAME_IDENTIFIER = "sub"
    NAME = "name"
    EMAIL = "email"
    ROLE = "role"
    SECURITY_STAMP = "security_stamp"


class AppClaims:
    Id = "Id"
    FullName = "FullName"
    UserName = "UserName"
    Email = "Email"
    Roles = "Roles"
    IsAdministrator = "IsAdministrator"


AUTHENTICATION_TYPE = "Identity.Application"


@dataclass(frozen=True)
class Claim:
    type: str
    value: str


@dataclass
class ClaimsIdentity:
    claims: List[Claim] = field(default_factory=list)
    authentication_type: Optional[str] = None

    @property
    def is_authenticated(self):
        return bool(self.authentication_type)

    def add_claim(self, claim: Claim):
        self.claims.append(claim)

    def find_all(self, claim_type):
        return [c for c in self.claims if c.type == claim_type]

    def find_first(self, claim_type):
        for c in self.claims:
            if c.type == claim_type:
                return c
        return None


@dataclass
class ClaimsPrincipal:
    identities: List[ClaimsIdentity] = field(default_factory=list)

    @property
    def identity(self):
        return self.identities[0] if self.identities else None

    @property
    def claims(self):
        return [c for i in self.identities for c in i.claims]

    def find_first_value(self, claim_type):
        for c in self.claims:
            if c.type == claim_type:
                return c.value
        return None

    def is_in_role(self, role):
        return any(c.type == ClaimTypes.ROLE and c.value == role for c in self.claims)

    # NiceGUI user storage only keeps JSON
    def to_storage(self):
        return [
            {
                "authentication_type": i.authentication_type,
                "claims": [[c.type, c.value] for c in i.claims],
            }
            for i in self.identities
        ]

    @classmethod
    def from_storage(cls, data):
        if not data:
            return None
        identities = [
            ClaimsIdentity(
                claims=[Claim(t, v) for t, v in item.get("claims", [])],
                authentication_type=item.get("authentication_type"),
            )
            for item in data
        ]
        return cls(identities=identities)


class UserClaimsPrincipalFactory:
    def __init__(self, user_manager: UserManager):
        self.user_manager = user_manager

    def generate_claims(self, user: User) -> ClaimsIdentity:
        identity = ClaimsIdentity(authentication_type=AUTHENTICATION_TYPE)
        identity.add_claim(Claim(ClaimTypes.NAME_IDENTIFIER, str(user.id)))
        identity.add_claim(Claim(ClaimTypes.NAME, user.user_name))
        if user.email:
            identity.add_claim(Claim(ClaimTypes.EMAIL, user.email))
        if user.security_stamp:
            identity.add_claim(Claim(ClaimTypes.SECURITY_STAMP, user.security_stamp))
        for role in self.user_manager.get_roles(user):
            identity.add_claim(Claim(ClaimTypes.ROLE, role))
        return identity

    def create(self, user: User) -> ClaimsPrincipal:
        return ClaimsPrincipal(identities=[self.generate_claims(user)])


class AdditionalUserClaimsPrincipalFactory(UserClaimsPrincipalFactory):
    def create(self, user: User) -> ClaimsPrincipal:
        principal = super().create(user)
        identity = principal.identity
        if identity is None:
            return principal

        identity.add_claim(Claim(AppClaims.Id, str(user.id)))
        identity.add_claim(Claim(AppClaims.FullName, user.full_name))
        return principal
