from models.audit_log import AuditLog
from models.tax_code import TaxCode
from models.journal import Journal
from models.partner import Partner, PartnerType
from models.good import Good
from models.journal_partner_link import JournalPartnerLink
from models.journal_good_link import JournalGoodLink
from models.journal_partner_good_link import JournalPartnerGoodLink

__all__ = ['AuditLog', 'Good', 'Journal', 'JournalGoodLink', 'JournalPartnerGoodLink', 'JournalPartnerLink', 'Partner', 'PartnerType', 'TaxCode',]
