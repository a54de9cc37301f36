from keycloak_smtp_sync.main import main

main()
