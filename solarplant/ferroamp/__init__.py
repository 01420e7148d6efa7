"""Ferroamp energy system: MQTT client, messages and live state."""