from udh import create_app

app = create_app()
