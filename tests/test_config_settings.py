from decimal import Decimal

from tipbridge.config import Settings


def test_lifi_api_key_falls_back_to_frontend_name(monkeypatch):
    """LI.FI key should load from the NEXT_PUBLIC_ name when the primary is unset."""

    monkeypatch.delenv("LIFI_API_KEY", raising=False)
    monkeypatch.setenv("NEXT_PUBLIC_LIFI_API_KEY", "frontend-key")

    settings = Settings()

    assert settings.lifi_api_key == "frontend-key"
    assert settings.has_lifi_key is True


def test_lifi_api_key_direct_env(monkeypatch):
    """Environment-provided LI.FI key remains the primary source."""

    monkeypatch.setenv("LIFI_API_KEY", "primary-key")
    monkeypatch.setenv("NEXT_PUBLIC_LIFI_API_KEY", "frontend-key")

    settings = Settings()

    assert settings.lifi_api_key == "primary-key"


def test_integrator_and_backend_aliases(monkeypatch):
    monkeypatch.delenv("LIFI_INTEGRATOR", raising=False)
    monkeypatch.delenv("BACKEND_API_URL", raising=False)
    monkeypatch.setenv("NEXT_PUBLIC_LIFI_INTEGRATOR", "my-tips")
    monkeypatch.setenv("NEXT_PUBLIC_API_URL", "https://api.example.test")

    settings = Settings()

    assert settings.lifi_integrator == "my-tips"
    assert settings.backend_api_url == "https://api.example.test"


def test_fee_and_slippage_defaults(monkeypatch):
    monkeypatch.delenv("INTEGRATOR_FEE", raising=False)
    monkeypatch.delenv("DEFAULT_SLIPPAGE", raising=False)

    settings = Settings()

    assert settings.integrator_fee == Decimal("0.01")
    assert settings.default_slippage == Decimal("0.005")


def test_resolve_evm_rpc_url(monkeypatch):
    monkeypatch.setenv("EVM_RPC_URLS", '{"10": "https://op.example.test"}')

    settings = Settings(alchemy_api_key="alchemy-key")

    assert settings.resolve_evm_rpc_url(10) == "https://op.example.test"
    assert settings.resolve_evm_rpc_url(137) == "https://polygon-mainnet.g.alchemy.com/v2/alchemy-key"
    assert settings.resolve_evm_rpc_url(56) == ""

    public = Settings(alchemy_api_key="", evm_rpc_urls={})
    assert public.resolve_evm_rpc_url(8453) == "https://mainnet.base.org"


def test_resolve_solana_rpc_url():
    assert Settings(solana_rpc_url="https://sol.example.test").resolve_solana_rpc_url() == "https://sol.example.test"
    assert (
        Settings(solana_rpc_url="", alchemy_api_key="k").resolve_solana_rpc_url()
        == "https://solana-mainnet.g.alchemy.com/v2/k"
    )
    assert Settings(solana_rpc_url="", alchemy_api_key="").resolve_solana_rpc_url() == "https://api.mainnet-beta.solana.com"
