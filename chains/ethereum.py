from chains.dto import ChainConfig, StableConfig


ethereum = ChainConfig(
    chain_id=1,
    name="ethereum",
    rpc_url="https://eth.drpc.org",
    multicall3_address="0xcA11bde05977b3631167028862bE2a173976CA11",
    stables=[
        StableConfig("USDC", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"),
        StableConfig("USDT", "0xdAC17F958D2ee523a2206206994597C13D831ec7"),
    ],
    known_pools=[
        # USDC/WETH 0.05%
        "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640",
        # USDC/WETH 0.3%
        "0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8",
    ],
)
