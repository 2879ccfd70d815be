"""
contracts — identity contracts, their helper library and tooling.

- contracts.identity  : KeyManager, ClaimHolder and ProxyAccount contract sources
- contracts.stdlib    : helper library importable from contract source
- contracts.templates : small target contracts used by tests and examples
- contracts.tools     : deployment helpers
"""
