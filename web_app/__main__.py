# python -m web_app
from web_app.web_app import main

main()
