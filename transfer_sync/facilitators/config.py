"""
Static facilitator declarations.

Changing this list requires a redeploy. Every address needs a
sync_start_date: the earliest instant the engine may fetch for it.
"""

from datetime import UTC, datetime

from transfer_sync.config.constants import (
    USDC_BASE_ADDRESS,
    USDC_DECIMALS,
    USDC_POLYGON_ADDRESS,
    USDC_SOLANA_ADDRESS,
    Chain,
)
from transfer_sync.facilitators.types import (
    Facilitator,
    FacilitatorAddressConfig,
    Token,
)

USDC_BASE_TOKEN = Token(address=USDC_BASE_ADDRESS, decimals=USDC_DECIMALS)
USDC_POLYGON_TOKEN = Token(address=USDC_POLYGON_ADDRESS, decimals=USDC_DECIMALS)
USDC_SOLANA_TOKEN = Token(address=USDC_SOLANA_ADDRESS, decimals=USDC_DECIMALS)


def _date(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=UTC)


def _base(address: str, start: datetime, enabled: bool = True) -> FacilitatorAddressConfig:
    return FacilitatorAddressConfig(
        address=address, token=USDC_BASE_TOKEN, sync_start_date=start, enabled=enabled
    )


def _solana(address: str, start: datetime, enabled: bool = True) -> FacilitatorAddressConfig:
    return FacilitatorAddressConfig(
        address=address, token=USDC_SOLANA_TOKEN, sync_start_date=start, enabled=enabled
    )


FACILITATORS: tuple[Facilitator, ...] = (
    Facilitator(
        id="coinbase",
        name="Coinbase",
        addresses={
            Chain.BASE: (
                _base("0xdbdf3d8ed80f84c35d01c6c9f9271761bad90ba6", _date(2025, 5, 5)),
            ),
            Chain.SOLANA: (
                _solana("L54zkaPQFeTn1UsEqieEXBqWrPShiaZEPD7mS5WXfQg", _date(2025, 10, 24)),
            ),
        },
    ),
    Facilitator(
        id="aurracloud",
        name="AurraCloud",
        addresses={
            Chain.BASE: (
                _base("0x222c4367a2950f3b53af260e111fc3060b0983ff", _date(2025, 10, 5)),
                _base("0xb70c4fe126de09bd292fe3d1e40c6d264ca6a52a", _date(2025, 10, 27)),
            ),
        },
    ),
    Facilitator(
        id="thirdweb",
        name="thirdweb",
        addresses={
            Chain.BASE: (
                _base("0x80c08de1a05df2bd633cf520754e40fde3c794d3", _date(2025, 10, 7)),
            ),
        },
    ),
    Facilitator(
        id="x402rs",
        name="X402rs",
        addresses={
            Chain.POLYGON: (
                FacilitatorAddressConfig(
                    address="0xd8dfc729cbd05381647eb5540d756f4f8ad63eec",
                    token=USDC_POLYGON_TOKEN,
                    sync_start_date=_date(2025, 4, 1),
                    enabled=False,
                ),
            ),
            Chain.BASE: (
                _base("0xd8dfc729cbd05381647eb5540d756f4f8ad63eec", _date(2024, 12, 5)),
                _base("0x76eee8f0acabd6b49f1cc4e9656a0c8892f3332e", _date(2025, 10, 26)),
                _base("0x97d38aa5de015245dcca76305b53abe6da25f6a5", _date(2025, 10, 24)),
                _base("0x0168f80e035ea68b191faf9bfc12778c87d92008", _date(2025, 10, 24)),
                _base("0x5e437bee4321db862ac57085ea5eb97199c0ccc5", _date(2025, 10, 24)),
                _base("0xc19829b32324f116ee7f80d193f99e445968499a", _date(2025, 10, 26)),
            ),
        },
    ),
    Facilitator(
        id="payAI",
        name="PayAI",
        addresses={
            Chain.SOLANA: (
                _solana("2wKupLR9q6wXYppw8Gr2NvWxKBUqm4PPJKkQfoxHDBg4", _date(2025, 7, 1)),
            ),
            Chain.BASE: (
                _base("0xc6699d2aada6c36dfea5c248dd70f9cb0235cb63", _date(2025, 5, 18)),
            ),
        },
    ),
    Facilitator(
        id="corbits",
        name="Corbits",
        addresses={
            Chain.SOLANA: (
                _solana("AepWpq3GQwL8CeKMtZyKtKPa7W91Coygh3ropAJapVdU", _date(2025, 9, 21)),
            ),
        },
    ),
    Facilitator(
        id="dexter",
        name="Dexter",
        addresses={
            Chain.SOLANA: (
                _solana("DEXVS3su4dZQWTvvPnLDJLRK1CeeKG6K3QqdzthgAkNV", _date(2025, 10, 26)),
            ),
        },
    ),
    Facilitator(
        id="daydreams",
        name="Daydreams",
        addresses={
            Chain.BASE: (
                _base("0x279e08f711182c79Ba6d09669127a426228a4653", _date(2025, 10, 16)),
            ),
            Chain.SOLANA: (
                _solana("DuQ4jFMmVABWGxabYHFkGzdyeJgS1hp4wrRuCtsJgT9a", _date(2025, 10, 16)),
            ),
        },
    ),
    Facilitator(
        id="mogami",
        name="Mogami",
        addresses={
            Chain.BASE: (
                _base("0xfe0920a0a7f0f8a1ec689146c30c3bbef439bf8a", _date(2025, 10, 24)),
            ),
        },
    ),
    Facilitator(
        id="openx402",
        name="OpenX402",
        addresses={
            Chain.BASE: (
                _base("0x97316fa4730bc7d3b295234f8e4d04a0a4c093e8", _date(2025, 10, 16)),
                _base("0x97db9b5291a218fc77198c285cefdc943ef74917", _date(2025, 10, 16)),
            ),
            Chain.SOLANA: (
                _solana("5xvht4fYDs99yprfm4UeuHSLxMBRpotfBtUCQqM3oDNG", _date(2025, 10, 16)),
            ),
        },
    ),
    Facilitator(
        id="ainalyst",
        name="AInalyst",
        addresses={
            Chain.BASE: (
                _base("0x109f3d0ff7ea61b03df26ca7ef0c41765d85ee0b", _date(2025, 10, 29)),
            ),
        },
    ),
)
