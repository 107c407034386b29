"""HTTP surface for the Telegram bot and cron-triggered previews."""
