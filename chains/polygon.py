from chains.dto import ChainConfig, StableConfig


polygon = ChainConfig(
    chain_id=137,
    name="polygon",
    rpc_url="https://polygon.drpc.org",
    multicall3_address="0xcA11bde05977b3631167028862bE2a173976CA11",
    stables=[
        StableConfig("USDC", "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"),
    ],
    known_pools=[
        # USDC/WETH 0.05%
        "0x45dda9cb7c25131df268515131f647d726f50608",
    ],
)
