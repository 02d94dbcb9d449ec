"""
Curated descriptions and categories for well-known flags.

Lookups fall back to ``"No description available"`` and ``"Other"``.
"""

from __future__ import annotations

NO_DESCRIPTION = "No description available"
DEFAULT_CATEGORY = "Other"

FLAG_DESCRIPTIONS: dict[str, str] = {
    # Graphics & Performance
    "DFlagDisablePostFx": "Disables post-processing effects to improve performance",
    "FFlagEnableGPUAcceleration": "Enables GPU hardware acceleration for better graphics performance",
    "DFlagGraphicsQuality": "Controls the overall graphics quality level",
    "FFlagDebugGraphicsPrefer": "Sets graphics API preference (DirectX/Vulkan/Metal)",
    "DFlagEnableHDRTextures": "Enables high dynamic range textures for enhanced visuals",
    # Network & Connectivity
    "DFlagNetworkOptimization": "Enables network optimization features for better connectivity",
    "FFlagPreferredRegion": "Sets preferred server region for connections",
    "DFlagConnectionQuality": "Controls connection quality requirements",
    # UI & Experience
    "FFlagEnableInGameMenu": "Enables the new in-game menu system",
    "DFlagUserInterface": "Controls UI rendering and behavior",
    "FFlagAnimationSystem": "Controls the animation system features",
    # Security & Safety
    "DFlagSecurityProtocol": "Controls security protocol settings",
    "FFlagAntiCheat": "Enables anti-cheat features",
    "DFlagContentFilter": "Controls content filtering settings",
    # Audio
    "FFlagSoundSystem": "Controls the sound system implementation",
    "DFlagAudioQuality": "Sets audio quality and processing level",
    "FFlagVoiceChat": "Controls voice chat features",
    # Physics & Engine
    "DFlagPhysicsSolver": "Controls physics solver implementation",
    "FFlagNewPhysics": "Enables new physics engine features",
    "DFlagCollisionSystem": "Controls collision detection system",
    # Memory & Resources
    "FFlagMemoryOptimization": "Enables memory usage optimizations",
    "DFlagResourceLoading": "Controls resource loading behavior",
    "FFlagAssetStreaming": "Controls asset streaming system",
    # Developer
    "DFlagDevConsole": "Enables developer console features",
    "FFlagDebugMode": "Enables debug mode features",
    "DFlagProfiler": "Controls profiler tools",
    # Platform specific
    "FFlagMobileOptimization": "Mobile-specific optimizations",
    "DFlagConsoleFeatures": "Console-specific features",
    "FFlagPlatformGraphics": "Platform-specific graphics settings",
    # Experimental
    "DFlagExperimental": "Enables experimental features",
    "FFlagBetaFeatures": "Enables beta testing features",
    "DFlagPrototype": "Enables prototype features",
    # Analytics & Telemetry
    "FFlagTelemetry": "Controls telemetry data collection",
    "DFlagAnalytics": "Controls analytics systems",
    "FFlagMetrics": "Controls performance metrics collection",
    # Social
    "DFlagSocialFeatures": "Controls social interaction features",
    "FFlagChat": "Controls chat system features",
    "DFlagFriendSystem": "Controls friend system features",
    # Game services
    "FFlagMatchmaking": "Controls matchmaking system",
    "DFlagGameJoin": "Controls game joining behavior",
    "FFlagServerSelection": "Controls server selection logic",
}

FLAG_CATEGORIES: dict[str, tuple[str, ...]] = {
    "Graphics": (
        "DFlagDisablePostFx",
        "FFlagEnableGPUAcceleration",
        "DFlagGraphicsQuality",
        "FFlagDebugGraphicsPrefer",
        "DFlagEnableHDRTextures",
    ),
    "Network": ("DFlagNetworkOptimization", "FFlagPreferredRegion", "DFlagConnectionQuality"),
    "UI": ("FFlagEnableInGameMenu", "DFlagUserInterface", "FFlagAnimationSystem"),
    "Security": ("DFlagSecurityProtocol", "FFlagAntiCheat", "DFlagContentFilter"),
    "Audio": ("FFlagSoundSystem", "DFlagAudioQuality", "FFlagVoiceChat"),
    "Physics": ("DFlagPhysicsSolver", "FFlagNewPhysics", "DFlagCollisionSystem"),
    "Memory": ("FFlagMemoryOptimization", "DFlagResourceLoading", "FFlagAssetStreaming"),
    "Developer": ("DFlagDevConsole", "FFlagDebugMode", "DFlagProfiler"),
    "Platform": ("FFlagMobileOptimization", "DFlagConsoleFeatures", "FFlagPlatformGraphics"),
    "Experimental": ("DFlagExperimental", "FFlagBetaFeatures", "DFlagPrototype"),
    "Analytics": ("FFlagTelemetry", "DFlagAnalytics", "FFlagMetrics"),
    "Social": ("DFlagSocialFeatures", "FFlagChat", "DFlagFriendSystem"),
    "GameServices": ("FFlagMatchmaking", "DFlagGameJoin", "FFlagServerSelection"),
}

_CATEGORY_BY_FLAG = {
    flag: category for category, flags in FLAG_CATEGORIES.items() for flag in flags
}


def describe(flag_name: str) -> str:
    return FLAG_DESCRIPTIONS.get(flag_name, NO_DESCRIPTION)


def category_of(flag_name: str) -> str:
    return _CATEGORY_BY_FLAG.get(flag_name, DEFAULT_CATEGORY)


def flags_in_category(category: str) -> list[str]:
    return list(FLAG_CATEGORIES.get(category, ()))
