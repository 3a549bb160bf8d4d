"""
Transaction Parser for Solana Blockchain

Converts `jsonParsed` getTransaction responses into TransactionRecord:
- Signature and block time
- Sender (fee payer, first account key)
- Programs invoked
- Recipients, from parsed instruction info, raw instruction accounts
  and token balance owners
"""

from typing import Any, Dict, List, Optional

import structlog

from agents.connection_analyzer.models import TransactionRecord

logger = structlog.get_logger(__name__)

# Parsed instruction info fields that name a receiving account
RECIPIENT_FIELDS = ("destination", "newAccount")
# Fields that only count when they differ from the sender
FOREIGN_AUTHORITY_FIELDS = ("authority", "owner")


def _pubkey(value: Any) -> Optional[str]:
    """Account keys come as plain strings or {"pubkey": ...} objects."""
    if isinstance(value, dict):
        return value.get("pubkey")
    return value


class TransactionParser:
    """Parse Solana transactions from RPC responses"""

    def __init__(self):
        self.logger = logger.bind(parser="transaction")

    def parse(
        self,
        transaction_data: Dict[str, Any],
        monitored_address: Optional[str] = None,
    ) -> Optional[TransactionRecord]:
        """
        Parse a jsonParsed transaction.

        Args:
            transaction_data: Result of getTransaction
            monitored_address: Wallet whose history is being fetched

        Returns:
            TransactionRecord, or None when transaction/meta are missing
        """
        if not transaction_data:
            return None

        tx = transaction_data.get("transaction")
        meta = transaction_data.get("meta")
        if not tx or not meta:
            return None

        try:
            message = tx.get("message", {})
            signatures = tx.get("signatures") or [""]
            account_keys = message.get("accountKeys") or []
            sender = _pubkey(account_keys[0]) if account_keys else None

            program_ids: List[str] = []
            recipients: List[str] = []

            for ix in message.get("instructions", []):
                program_id = ix.get("programId")
                if program_id:
                    program_ids.append(program_id)
                recipients.extend(self.instruction_recipients(ix, sender))

            recipients.extend(self.token_balance_owners(meta, sender))

            return TransactionRecord.from_dict({
                "signature": signatures[0],
                "blockTime": transaction_data.get("blockTime") or 0,
                "sender": sender,
                "recipients": recipients,
                "programIds": program_ids,
            })

        except (AttributeError, IndexError, TypeError) as e:
            self.logger.warning(
                "transaction_parse_error",
                error=str(e),
                monitored=monitored_address,
            )
            return None

    def instruction_recipients(self, ix: Dict[str, Any], sender: Optional[str]) -> List[str]:
        """Accounts an instruction moves value or authority to."""
        recipients = []
        program_id = ix.get("programId")

        if "parsed" in ix:
            parsed = ix.get("parsed")
            info = parsed.get("info") if isinstance(parsed, dict) else None
            if not info:
                return recipients

            for key in RECIPIENT_FIELDS:
                if info.get(key):
                    recipients.append(info[key])
            for key in FOREIGN_AUTHORITY_FIELDS:
                if info.get(key) and info[key] != sender:
                    recipients.append(info[key])
        else:
            for account in ix.get("accounts", []):
                account = _pubkey(account)
                if account and account != sender and account != program_id:
                    recipients.append(account)

        return recipients

    def token_balance_owners(self, meta: Dict[str, Any], sender: Optional[str]) -> List[str]:
        """Owners of token accounts touched by the transaction, post then pre."""
        owners = []
        for key in ("postTokenBalances", "preTokenBalances"):
            for balance in meta.get(key) or []:
                owner = balance.get("owner")
                if owner and owner != sender:
                    owners.append(owner)
        return owners
