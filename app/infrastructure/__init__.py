"""Infrastructure modules for the notification service.

Centralized infrastructure components:
- configuration: Settings management (Settings, settings)
- logging: Structured logging (get_module_logger)
- clients: AWS clients (DynamoDB)
- notifications: Notification engine (dispatcher, channels, audit store)
- operations: Operation results
- services: Dependency injection providers (SettingsDep, NotificationServiceDep)
"""
