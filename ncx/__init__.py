"""NCX web push: abonelik kaydı, VAPID imzalı dağıtım, service worker sözleşmesi."""
