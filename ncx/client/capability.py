"""
Push kullanılabilirlik politikası.
iOS'ta web push yalnızca ana ekrana eklenmiş (standalone) uygulamada çalışır;
"Push API var" kontrolü tek başına yetmez.
"""
import re
from dataclasses import dataclass

_IOS_UA = re.compile(r"iphone|ipad|ipod")


def is_ios(user_agent: str | None) -> bool:
    return bool(_IOS_UA.search((user_agent or "").lower()))


@dataclass(frozen=True)
class PushCapability:
    push_supported: bool  # serviceWorker in navigator && PushManager in window
    is_ios: bool
    is_standalone: bool

    @property
    def usable(self) -> bool:
        return self.push_supported and (not self.is_ios or self.is_standalone)

    @property
    def needs_install(self) -> bool:
        """iOS Safari sekmesi: önce uygulamayı ana ekrana ekle."""
        return self.push_supported and self.is_ios and not self.is_standalone


def detect_capability(platform) -> PushCapability:
    return PushCapability(
        push_supported=bool(platform.has_service_worker and platform.has_push_manager),
        is_ios=is_ios(platform.user_agent),
        is_standalone=bool(platform.is_standalone),
    )
