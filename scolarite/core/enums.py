from enum import Enum


class SchoolLevel(str, Enum):
    PETITE_SECTION = "Petite Section"
    MOYENNE_SECTION = "Moyenne Section"
    GRANDE_SECTION = "Grande Section"
    CP1 = "CP1"
    CP2 = "CP2"
    CE1 = "CE1"
    CE2 = "CE2"
    CM1 = "CM1"
    CM2 = "CM2"


class PaymentType(str, Enum):
    """Conventional payment type tags. Stored records may carry other labels."""

    INSCRIPTION = "inscription"
    SCOLARITE = "scolarite"
    CANTINE = "cantine"


class PaymentMode(str, Enum):
    ESPECE = "espece"
    MOBILE = "mobile"
    CHEQUE = "cheque"
    VIREMENT = "virement"


class InstallmentStatus(str, Enum):
    unpaid = "unpaid"
    partial = "partial"
    paid = "paid"


class StudentStatus(str, Enum):
    ACTIF = "Actif"
    INACTIF = "Inactif"
    TRANSFERE = "Transféré"


class EnrollmentStatus(str, Enum):
    INSCRIT = "inscrit"
    NON_INSCRIT = "non-inscrit"


class UserRole(str, Enum):
    ADMIN = "Admin"
    SECRETAIRE = "Secrétaire"
    ENSEIGNANT = "Enseignant"


class HistoryType(str, Enum):
    CREATION = "création"
    MODIFICATION = "modification"
    SUPPRESSION = "suppression"
    PAIEMENT = "paiement"
    CONNEXION = "connexion"
    AUTRE = "autre"
