"""
Services module for LD Growth.

Business logic services that coordinate between the data layer and the API
and worker layers. Services compose database operations classes and share
the retry policy passed in by their caller.

Available Services:
- SettingsService: Scheduling settings validation, repair and updates
- EvaluationSchedulerService: Automatic evaluation scheduling runs
- ReminderService: Upcoming evaluation reminders
- NotificationService: In-app notifications about evaluations
- EmailService: SMTP delivery

Import services from their own modules. ``utils.retry`` loads the logger
package from here, so this package must not import its services eagerly.
"""
